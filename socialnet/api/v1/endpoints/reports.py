"""User-facing content reporting."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from socialnet.api.deps import get_current_active_user, get_db
from socialnet.models.user import User
from socialnet.schemas.admin import ReportCreate, ReportResponse
from socialnet.services.moderation_service import moderation_service

router = APIRouter(
    prefix="/reports",
    tags=["Reports"],
)


@router.post(
    "",
    response_model=ReportResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Report a post, comment or user",
)
def report_content(
    report_in: ReportCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> ReportResponse:
    report = moderation_service.report_content(
        db,
        reporter_id=current_user.id,
        content_id=report_in.content_id,
        content_type=report_in.content_type,
        reason=report_in.reason,
        severity=report_in.severity,
    )
    return ReportResponse.model_validate(report)
