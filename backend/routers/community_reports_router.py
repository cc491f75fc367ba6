from typing import List

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
from helpers.rate_limiter import CREATE_REPORT_LIMIT, INTERACTION_LIMIT, limiter
from repositories.database import get_db
from services import ReportService

router = APIRouter(prefix="/communities/{slug}/reports", tags=["reports"])


@router.get("", response_model=List[schemas.Report])
def list_community_reports(slug: str, db: Session = Depends(get_db)):
    """List the reports of a community, oldest first."""
    return ReportService.list_community_reports(db, slug)


@router.post(
    "",
    response_model=schemas.ReportMutationResponse,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(CREATE_REPORT_LIMIT)
def create_community_report(
    request: Request,
    slug: str,
    report: schemas.ReportCreate,
    db: Session = Depends(get_db),
    current_user: schemas.CurrentUser = Depends(auth.get_current_user),
):
    """
    Submit a report into a community.

    Domain exceptions are caught by centralized exception handlers.
    """
    created = ReportService.create_community_report(db, slug, report, current_user.id)
    return {"success": True, "report": created}


@router.get("/{report_id}", response_model=schemas.ReportEnvelope)
def get_community_report(slug: str, report_id: int, db: Session = Depends(get_db)):
    """Get a single report. Each call counts as a view."""
    return {"report": ReportService.get_community_report(db, slug, report_id)}


@router.patch("/{report_id}", response_model=schemas.ReportMutationResponse)
def update_community_report(
    slug: str,
    report_id: int,
    update: schemas.ReportUpdate,
    db: Session = Depends(get_db),
    current_user: schemas.CurrentUser = Depends(auth.get_current_user),
):
    """Update a report (owner or community admins)."""
    report = ReportService.update_community_report(
        db, slug, report_id, update, current_user.id
    )
    return {"success": True, "report": report}


@router.delete("/{report_id}", response_model=schemas.SuccessResponse)
def delete_community_report(
    slug: str,
    report_id: int,
    db: Session = Depends(get_db),
    current_user: schemas.CurrentUser = Depends(auth.get_current_user),
):
    """Delete a report (owner or community admins)."""
    ReportService.delete_community_report(db, slug, report_id, current_user.id)
    return {"success": True}


@router.post("/{report_id}/upvote", response_model=schemas.UpvoteResponse)
@limiter.limit(INTERACTION_LIMIT)
def upvote_report(
    request: Request,
    response: Response,
    slug: str,
    report_id: int,
    db: Session = Depends(get_db),
    current_user: schemas.CurrentUser = Depends(auth.get_current_user),
):
    """
    Upvote a report.

    Returns 201 for a new upvote and 200 when the caller already upvoted.
    """
    count, created = ReportService.upvote_report(db, slug, report_id, current_user.id)
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return schemas.UpvoteResponse(upvoted=True, upvote_count=count)
