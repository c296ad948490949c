"""Field reports: submission, listing, and verification status changes."""

from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import Principal
from core.errors import Forbidden, NotFound, ValidationFailed
from models.report import VERIFICATION_STATUSES, Report
from repositories.disaster_repo import DisasterRepository
from repositories.report_repo import ReportRepository

logger = logging.getLogger(__name__)


class ReportService:
    def __init__(self, session: AsyncSession) -> None:
        self.repo = ReportRepository(session)
        self.disasters = DisasterRepository(session)

    async def _require_disaster(self, disaster_id: str) -> None:
        if not await self.disasters.exists(disaster_id):
            raise NotFound("Disaster not found")

    async def create(
        self,
        principal: Principal,
        disaster_id: str,
        content: Optional[str],
        user_id: Optional[str] = None,
        image_url: Optional[str] = None,
    ) -> Report:
        if not content or not content.strip():
            raise ValidationFailed("content is required")
        await self._require_disaster(disaster_id)
        report = Report(
            disaster_id=disaster_id,
            user_id=(user_id or "").strip() or principal.id,
            content=content,
            image_url=(image_url or "").strip() or None,
            verification_status="pending",
        )
        await self.repo.create(report)
        return report

    async def list(self, disaster_id: str) -> List[Report]:
        await self._require_disaster(disaster_id)
        return await self.repo.list_for_disaster(disaster_id)

    async def set_status(
        self, principal: Principal, report_id: str, verification_status: Optional[str]
    ) -> Report:
        """Admin-only status change."""
        if not principal.is_admin:
            raise Forbidden("Admin access required")
        if verification_status is None:
            raise ValidationFailed("Verification status is required")
        if verification_status not in VERIFICATION_STATUSES:
            raise ValidationFailed(
                f"Invalid verification status {verification_status!r}; "
                f"expected one of {', '.join(VERIFICATION_STATUSES)}"
            )
        report = await self.repo.get_by_id(report_id)
        if report is None:
            raise NotFound("Report not found")
        report.verification_status = verification_status
        await self.repo.session.flush()
        return report

    async def apply_image_check(self, disaster_id: str, report_id: str, status: str) -> bool:
        """Record an image classification on a report of this disaster; False if not applied."""
        if status not in VERIFICATION_STATUSES:
            return False
        report = await self.repo.get_for_disaster(disaster_id, report_id)
        if report is None:
            logger.warning("Report %s not found for disaster %s; status not recorded", report_id, disaster_id)
            return False
        report.verification_status = status
        await self.repo.session.flush()
        return True
