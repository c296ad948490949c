"""Field reports under /api/reports."""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from core.auth import Principal
from core.dependencies import get_current_principal, get_report_service
from schemas.records import ReportOut
from services.report_service import ReportService

router = APIRouter(prefix="/reports", tags=["reports"])


class ReportCreate(BaseModel):
    content: Optional[str] = None
    user_id: Optional[str] = None
    image_url: Optional[str] = None


class ReportStatusUpdate(BaseModel):
    verification_status: Optional[str] = None


@router.post("/disasters/{disaster_id}/reports", status_code=201, summary="Submit a report")
async def create_report(
    disaster_id: str,
    body: ReportCreate,
    principal: Principal = Depends(get_current_principal),
    service: ReportService = Depends(get_report_service),
) -> dict:
    report = await service.create(
        principal,
        disaster_id,
        content=body.content,
        user_id=body.user_id,
        image_url=body.image_url,
    )
    return {"success": True, "data": ReportOut.from_model(report).model_dump(mode="json")}


@router.get("/disasters/{disaster_id}/reports", summary="List reports, newest first")
async def list_reports(
    disaster_id: str,
    service: ReportService = Depends(get_report_service),
) -> dict:
    reports = await service.list(disaster_id)
    data = [ReportOut.from_model(r).model_dump(mode="json") for r in reports]
    return {"success": True, "data": data, "count": len(data)}


@router.put("/{report_id}", summary="Set a report's verification status (admin)")
async def update_report(
    report_id: str,
    body: ReportStatusUpdate,
    principal: Principal = Depends(get_current_principal),
    service: ReportService = Depends(get_report_service),
) -> dict:
    report = await service.set_status(principal, report_id, body.verification_status)
    return {"success": True, "data": ReportOut.from_model(report).model_dump(mode="json")}
