"""
Report Service

Handles report submission, triage updates, deletion and upvotes, both inside
a community and through the community-agnostic ``/reports`` API. Every
update and delete path is authorized by the same access policy.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from helpers.geo import is_valid_coordinate, to_wkt_point
from helpers.sanitization import sanitize_fields
from models.exceptions import (
    CommunityInactiveException,
    InvalidCoordinatesException,
    MissingFieldsException,
    ReportNotFoundException,
    ValidationException,
)
from repositories.community_repository import CommunityRepository
from repositories.report_repository import ReportRepository
from repositories.report_upvote_repository import ReportUpvoteRepository
from services.access_policy_service import AccessPolicyService
from services.community_service import CommunityService

REPORT_TEXT_FIELDS = {"title", "description", "address", "resolution_notes"}
REPORT_URL_FIELDS = {"image_url"}
CREATE_FIELDS = {
    "title",
    "description",
    "category",
    "latitude",
    "longitude",
    "image_url",
    "address",
    "priority",
}

COMMUNITY_REPORT_REQUIRED = ("title", "category", "latitude", "longitude")
STANDALONE_REPORT_REQUIRED = (
    "title",
    "description",
    "category",
    "latitude",
    "longitude",
)

# Columns that cannot be cleared through an update
NON_NULLABLE_UPDATE_FIELDS = {"title", "category", "status", "priority", "lat", "lng"}


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ReportService:
    """Service for report-related business logic."""

    @staticmethod
    def _build_report(
        data: schemas.ReportCreate,
        required: tuple[str, ...],
        user_id: str,
        community_id: Optional[int],
    ) -> db_models.Report:
        """Validate a create payload and build the (unsaved) report row."""
        fields = sanitize_fields(
            data.model_dump(include=CREATE_FIELDS),
            REPORT_TEXT_FIELDS,
            REPORT_URL_FIELDS,
        )

        missing = [
            name
            for name in required
            if fields.get(name) is None or fields.get(name) == ""
        ]
        if missing:
            raise MissingFieldsException(
                missing, f"Missing required fields: {', '.join(missing)}"
            )

        lat, lng = fields["latitude"], fields["longitude"]
        if not is_valid_coordinate(lat, lng):
            raise InvalidCoordinatesException(lat, lng)

        now = _utc_now()
        return db_models.Report(
            title=fields["title"],
            description=fields.get("description"),
            category=fields["category"],
            status=db_models.ReportStatus.PENDING,
            priority=fields.get("priority") or db_models.ReportPriority.NORMAL,
            lat=lat,
            lng=lng,
            location=to_wkt_point(lat, lng),
            address=fields.get("address"),
            image_url=fields.get("image_url"),
            community_id=community_id,
            user_id=user_id,
            upvote_count=0,
            view_count=0,
            created_at=now,
            updated_at=now,
        )

    @staticmethod
    def _apply_changes(report: db_models.Report, fields: dict[str, Any]) -> None:
        """
        Write allow-listed fields onto a report.

        Latches ``resolved_at`` on the first move to RESOLVED, refreshes the
        WKT location when a coordinate changes and stamps ``updated_at``.
        """
        fields = sanitize_fields(fields, REPORT_TEXT_FIELDS, REPORT_URL_FIELDS)

        cleared = sorted(
            name
            for name in NON_NULLABLE_UPDATE_FIELDS & fields.keys()
            if fields[name] is None or fields[name] == ""
        )
        if cleared:
            raise ValidationException(f"Fields cannot be empty: {', '.join(cleared)}")

        lat = fields.get("lat", report.lat)
        lng = fields.get("lng", report.lng)
        if not is_valid_coordinate(lat, lng):
            raise InvalidCoordinatesException(lat, lng)

        for field, value in fields.items():
            setattr(report, field, value)

        now = _utc_now()
        if "lat" in fields or "lng" in fields:
            report.location = to_wkt_point(lat, lng)
        if (
            report.status == db_models.ReportStatus.RESOLVED
            and report.resolved_at is None
        ):
            report.resolved_at = now
            logger.info(f"Report resolved: id={report.id}")
        report.updated_at = now

    @staticmethod
    def _get_report_in_community(
        db: Session, slug: str, report_id: int
    ) -> tuple[db_models.Community, db_models.Report]:
        community = CommunityService.get_community(db, slug)
        report = ReportRepository(db).get_in_community(report_id, community.id)
        if report is None:
            raise ReportNotFoundException(report_id)
        return community, report

    @staticmethod
    def _get_report(db: Session, report_id: int) -> db_models.Report:
        report = ReportRepository(db).get_by_id(report_id)
        if report is None:
            raise ReportNotFoundException(report_id)
        return report

    @staticmethod
    def _delete(db: Session, report: db_models.Report, user_id: str) -> None:
        if report.community is not None:
            CommunityRepository(db).adjust_report_count(report.community, -1)
        report_id = report.id
        ReportRepository(db).delete(report)
        logger.info(f"Report deleted: id={report_id}, by={user_id}")

    # Community-scoped reports

    @staticmethod
    def list_community_reports(db: Session, slug: str) -> list[db_models.Report]:
        """
        Get the reports of a community, oldest first.

        Raises:
            CommunityNotFoundException: If no community has this slug
        """
        community = CommunityService.get_community(db, slug)
        return ReportRepository(db).get_by_community(community.id)

    @staticmethod
    def create_community_report(
        db: Session, slug: str, data: schemas.ReportCreate, user_id: str
    ) -> db_models.Report:
        """
        Submit a report into a community.

        Args:
            db: Database session
            slug: Community slug
            data: Report payload
            user_id: Reporting user, recorded as owner

        Returns:
            Created report with status pending

        Raises:
            CommunityNotFoundException: If no community has this slug
            MissingFieldsException: If title, category or coordinates are missing
            CommunityInactiveException: If the community is disabled
        """
        community = CommunityService.get_community(db, slug)
        report = ReportService._build_report(
            data, COMMUNITY_REPORT_REQUIRED, user_id, community.id
        )
        if not community.is_active:
            raise CommunityInactiveException()

        report_repo = ReportRepository(db)
        report_repo.add(report)
        CommunityRepository(db).adjust_report_count(community, 1)
        report_repo.commit()
        report_repo.refresh(report)

        logger.info(
            f"Report submitted: id={report.id}, community={slug}, user={user_id}"
        )
        return report

    @staticmethod
    def get_community_report(
        db: Session, slug: str, report_id: int
    ) -> db_models.Report:
        """
        Get a single report of a community and count the view.

        Raises:
            CommunityNotFoundException: If no community has this slug
            ReportNotFoundException: If the report is not in this community
        """
        _, report = ReportService._get_report_in_community(db, slug, report_id)
        return ReportRepository(db).increment_views(report)

    @staticmethod
    def update_community_report(
        db: Session,
        slug: str,
        report_id: int,
        update: schemas.ReportUpdate,
        user_id: str,
    ) -> db_models.Report:
        """
        Update allow-listed fields of a community report.

        Args:
            db: Database session
            slug: Community slug
            report_id: Report ID
            update: Allow-listed fields, only those set are written
            user_id: Acting user

        Returns:
            Updated report

        Raises:
            CommunityNotFoundException: If no community has this slug
            ReportNotFoundException: If the report is not in this community
            InsufficientPermissionsException: If the user is neither the
                owner nor an admin of the community
        """
        community, report = ReportService._get_report_in_community(
            db, slug, report_id
        )
        AccessPolicyService.require_report_editor(db, community, report, user_id)

        ReportService._apply_changes(report, update.model_dump(exclude_unset=True))
        return ReportRepository(db).save(report)

    @staticmethod
    def delete_community_report(
        db: Session, slug: str, report_id: int, user_id: str
    ) -> bool:
        """
        Delete a community report.

        Raises:
            CommunityNotFoundException: If no community has this slug
            ReportNotFoundException: If the report is not in this community
            InsufficientPermissionsException: If the user may not delete it
        """
        community, report = ReportService._get_report_in_community(
            db, slug, report_id
        )
        AccessPolicyService.require_report_editor(
            db, community, report, user_id, action="delete"
        )
        ReportService._delete(db, report, user_id)
        return True

    @staticmethod
    def upvote_report(
        db: Session, slug: str, report_id: int, user_id: str
    ) -> tuple[int, bool]:
        """
        Upvote a community report once per user.

        Returns:
            Tuple of (upvote_count, created) where created is False when the
            user had already upvoted

        Raises:
            CommunityNotFoundException: If no community has this slug
            ReportNotFoundException: If the report is not in this community
        """
        _, report = ReportService._get_report_in_community(db, slug, report_id)

        upvote_repo = ReportUpvoteRepository(db)
        if upvote_repo.get_upvote(report.id, user_id) is not None:
            return report.upvote_count, False

        upvote_repo.add(db_models.ReportUpvote(report_id=report.id, user_id=user_id))
        try:
            upvote_repo.flush()
        except IntegrityError:
            # Concurrent upvote by the same user landed first
            upvote_repo.rollback()
            return upvote_repo.count_for_report(report_id), False

        report.upvote_count = upvote_repo.count_for_report(report.id)
        report = ReportRepository(db).save(report)
        return report.upvote_count, True

    # Community-agnostic reports

    @staticmethod
    def list_reports(
        db: Session,
        status: Optional[db_models.ReportStatus] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[db_models.Report]:
        """Get reports across all communities, oldest first."""
        return ReportRepository(db).get_all_oldest_first(status, skip, limit)

    @staticmethod
    def create_report(
        db: Session, data: schemas.StandaloneReportCreate, user_id: str
    ) -> db_models.Report:
        """
        Submit a report, optionally scoped to a community by slug.

        Raises:
            MissingFieldsException: If a required field is missing
            CommunityNotFoundException: If ``community_slug`` is unknown
            CommunityInactiveException: If that community is disabled
        """
        community = None
        if data.community_slug:
            community = CommunityService.get_community(db, data.community_slug)

        report = ReportService._build_report(
            data,
            STANDALONE_REPORT_REQUIRED,
            user_id,
            community.id if community is not None else None,
        )
        if community is not None and not community.is_active:
            raise CommunityInactiveException()

        report_repo = ReportRepository(db)
        report_repo.add(report)
        if community is not None:
            CommunityRepository(db).adjust_report_count(community, 1)
        report_repo.commit()
        report_repo.refresh(report)

        logger.info(f"Report submitted: id={report.id}, user={user_id}")
        return report

    @staticmethod
    def update_report_status(
        db: Session, report_id: int, update: schemas.ReportStatusUpdate, user_id: str
    ) -> db_models.Report:
        """
        Change only the status of a report.

        A report outside any community can only be changed by its owner.

        Raises:
            MissingFieldsException: If no status was sent
            ReportNotFoundException: If the report does not exist
            InsufficientPermissionsException: If the user may not update it
        """
        if update.status is None:
            raise MissingFieldsException(["status"], "Missing status")

        report = ReportService._get_report(db, report_id)
        AccessPolicyService.require_report_editor(
            db, report.community, report, user_id
        )

        ReportService._apply_changes(report, {"status": update.status})
        return ReportRepository(db).save(report)

    @staticmethod
    def delete_report(db: Session, report_id: int, user_id: str) -> bool:
        """
        Delete a report by ID.

        Raises:
            ReportNotFoundException: If the report does not exist
            InsufficientPermissionsException: If the user may not delete it
        """
        report = ReportService._get_report(db, report_id)
        AccessPolicyService.require_report_editor(
            db, report.community, report, user_id, action="delete"
        )
        ReportService._delete(db, report, user_id)
        return True
