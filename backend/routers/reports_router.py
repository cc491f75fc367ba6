"""Community-agnostic report API used by the submission form and the admin dashboard."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from helpers.pagination import DEFAULT_LIMIT, PaginationLimit, PaginationSkip
from helpers.rate_limiter import CREATE_REPORT_LIMIT, limiter
from repositories.database import get_db
from services import ReportService

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("", response_model=schemas.ReportListResponse)
def list_reports(
    status_filter: Optional[db_models.ReportStatus] = Query(
        None, alias="status", description="Only reports in this status"
    ),
    skip: PaginationSkip = 0,
    limit: PaginationLimit = DEFAULT_LIMIT,
    db: Session = Depends(get_db),
):
    """List all reports, oldest first."""
    return {"data": ReportService.list_reports(db, status_filter, skip, limit)}


@router.post(
    "",
    response_model=schemas.ReportDataResponse,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(CREATE_REPORT_LIMIT)
def create_report(
    request: Request,
    report: schemas.StandaloneReportCreate,
    db: Session = Depends(get_db),
    current_user: schemas.CurrentUser = Depends(auth.get_current_user),
):
    """
    Submit a report, optionally into the community named by ``community_slug``.

    Domain exceptions are caught by centralized exception handlers.
    """
    created = ReportService.create_report(db, report, current_user.id)
    return {"success": True, "data": created}


@router.patch("/{report_id}", response_model=schemas.ReportDataResponse)
def update_report_status(
    report_id: int,
    update: schemas.ReportStatusUpdate,
    db: Session = Depends(get_db),
    current_user: schemas.CurrentUser = Depends(auth.get_current_user),
):
    """Change the status of a report (owner or community admins)."""
    report = ReportService.update_report_status(
        db, report_id, update, current_user.id
    )
    return {"success": True, "data": report}


@router.delete("/{report_id}", response_model=schemas.SuccessResponse)
def delete_report(
    report_id: int,
    db: Session = Depends(get_db),
    current_user: schemas.CurrentUser = Depends(auth.get_current_user),
):
    """Delete a report (owner or community admins)."""
    ReportService.delete_report(db, report_id, current_user.id)
    return {"success": True}
