"""POST /api/verification/disasters/{id}/verify-image."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from core.dependencies import get_image_verifier, get_report_service
from core.errors import ValidationFailed
from services.image_verification_service import ImageVerificationService
from services.report_service import ReportService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/verification", tags=["verification"])


class VerifyImageRequest(BaseModel):
    image_url: Optional[str] = None
    report_id: Optional[str] = None


@router.post("/disasters/{disaster_id}/verify-image", summary="Check an image for authenticity")
async def verify_image(
    disaster_id: str,
    body: VerifyImageRequest,
    verifier: ImageVerificationService = Depends(get_image_verifier),
    reports: ReportService = Depends(get_report_service),
) -> dict:
    """When report_id is given and the check succeeded, the report gets the classification."""
    image_url = (body.image_url or "").strip()
    if not image_url:
        raise ValidationFailed("Image URL is required")

    outcome = await verifier.verify(image_url)
    result = outcome.value
    report_updated = False
    if body.report_id and result.status != "error":
        report_updated = await reports.apply_image_check(disaster_id, body.report_id, result.status)

    logger.info("Image verified: %s (confidence: %d%%)", result.status, result.confidence)
    return {
        "success": True,
        "data": {
            **result.model_dump(mode="json"),
            "report_updated": report_updated,
            "fallback_used": outcome.degraded,
            "fallback_reason": outcome.reason,
        },
    }
