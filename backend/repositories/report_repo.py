from __future__ import annotations

from typing import List, Optional

from sqlalchemy import desc, select

from models.report import Report
from .base import BaseRepository


class ReportRepository(BaseRepository[Report]):
    """Repository for Report entities."""

    model = Report

    async def create(self, report: Report) -> Report:
        return await self.add(report)

    async def list_for_disaster(self, disaster_id: str) -> List[Report]:
        stmt = (
            select(Report)
            .where(Report.disaster_id == disaster_id)
            .order_by(desc(Report.created_at))
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_for_disaster(self, disaster_id: str, report_id: str) -> Optional[Report]:
        report = await self.get_by_id(report_id)
        if report is None or report.disaster_id != disaster_id:
            return None
        return report
