"""
Community Service

Handles community listing, creation, settings updates and membership.
"""

from datetime import datetime, timezone
from typing import Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from helpers.geo import haversine_km, is_valid_coordinate, to_wkt_point
from helpers.sanitization import sanitize_fields
from helpers.slugs import slugify, with_suffix
from models.config import settings
from models.exceptions import (
    CommunityInactiveException,
    CommunityNotFoundException,
    InvalidCoordinatesException,
    MissingFieldsException,
    SlugAlreadyExistsException,
    ValidationException,
)
from repositories.community_member_repository import CommunityMemberRepository
from repositories.community_repository import CommunityRepository
from repositories.report_repository import ReportRepository
from services.access_policy_service import AccessPolicyService

COMMUNITY_TEXT_FIELDS = {"name", "description", "address"}
COMMUNITY_URL_FIELDS = {"icon_url", "banner_url"}

# Columns that cannot be cleared through an update
NON_NULLABLE_UPDATE_FIELDS = {
    "name",
    "center_lat",
    "center_lng",
    "radius_km",
    "category",
    "is_active",
}


class CommunityService:
    """Service for community-related business logic."""

    @staticmethod
    def get_community(db: Session, slug: str) -> db_models.Community:
        """
        Get community by slug.

        Raises:
            CommunityNotFoundException: If no community has this slug
        """
        community = CommunityRepository(db).get_by_slug(slug)
        if community is None:
            raise CommunityNotFoundException(slug)
        return community

    @staticmethod
    def list_communities(
        db: Session,
        lat: Optional[float] = None,
        lng: Optional[float] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[schemas.Community]:
        """
        List communities.

        Newest first by default. When both ``lat`` and ``lng`` are given,
        every community carries ``distance_km`` from that point and the
        list is ordered nearest first.

        Args:
            db: Database session
            lat: Optional latitude of the viewer
            lng: Optional longitude of the viewer
            skip: Number of records to skip
            limit: Maximum number of records to return

        Returns:
            List of communities

        Raises:
            InvalidCoordinatesException: If the point is out of range
        """
        community_repo = CommunityRepository(db)

        if lat is None or lng is None:
            return [
                schemas.Community.model_validate(community)
                for community in community_repo.get_all_newest_first(skip, limit)
            ]

        if not is_valid_coordinate(lat, lng):
            raise InvalidCoordinatesException(lat, lng)

        ranked = [
            schemas.Community.model_validate(community).model_copy(
                update={
                    "distance_km": round(
                        haversine_km(
                            lat, lng, community.center_lat, community.center_lng
                        ),
                        2,
                    )
                }
            )
            for community in community_repo.get_all()
        ]
        ranked.sort(key=lambda c: (c.distance_km, c.id))
        return ranked[skip : skip + limit]

    @staticmethod
    def _unique_slug(community_repo: CommunityRepository, name: str) -> str:
        base = slugify(name) or "community"
        taken = community_repo.slugs_with_prefix(base)
        if base not in taken:
            return base
        n = 2
        while with_suffix(base, n) in taken:
            n += 1
        return with_suffix(base, n)

    @staticmethod
    def create_community(
        db: Session, data: schemas.CommunityCreate, user_id: str
    ) -> db_models.Community:
        """
        Create a community administered by the acting user.

        The creator becomes ``admin_id`` and counts as the first member.

        Args:
            db: Database session
            data: Community payload
            user_id: Acting user

        Returns:
            Created community

        Raises:
            MissingFieldsException: If name or center coordinates are missing
            InvalidCoordinatesException: If the center is out of range
            SlugAlreadyExistsException: If a requested slug is taken
        """
        fields = sanitize_fields(
            data.model_dump(), COMMUNITY_TEXT_FIELDS, COMMUNITY_URL_FIELDS
        )

        # Zero is a valid coordinate, so check for None rather than falsiness
        missing = [
            name
            for name in ("name", "center_lat", "center_lng")
            if fields.get(name) is None or fields.get(name) == ""
        ]
        if missing:
            raise MissingFieldsException(
                missing, f"Missing required fields: {', '.join(missing)}"
            )

        if not is_valid_coordinate(fields["center_lat"], fields["center_lng"]):
            raise InvalidCoordinatesException(
                fields["center_lat"], fields["center_lng"]
            )

        community_repo = CommunityRepository(db)
        requested_slug = fields.pop("slug", None)
        if requested_slug:
            slug = slugify(requested_slug)
            if not slug:
                raise ValidationException("Invalid slug")
            if community_repo.slug_exists(slug):
                raise SlugAlreadyExistsException(slug)
        else:
            slug = CommunityService._unique_slug(community_repo, fields["name"])

        if fields.get("radius_km") is None:
            fields["radius_km"] = settings.DEFAULT_COMMUNITY_RADIUS_KM

        now = datetime.now(timezone.utc)
        community = db_models.Community(
            **fields,
            slug=slug,
            location=to_wkt_point(fields["center_lat"], fields["center_lng"]),
            admin_id=user_id,
            member_count=1,
            report_count=0,
            created_at=now,
            updated_at=now,
        )
        try:
            community = community_repo.create(community)
        except IntegrityError:
            community_repo.rollback()
            raise SlugAlreadyExistsException(slug)

        logger.info(
            f"Community created: id={community.id}, slug={community.slug}, "
            f"admin={user_id}"
        )
        return community

    @staticmethod
    def get_community_by_slug(
        db: Session, slug: str, user_id: Optional[str] = None
    ) -> schemas.CommunityDetail:
        """
        Get a community with the requesting user's standing in it.

        Args:
            db: Database session
            slug: Community slug
            user_id: Requesting user, None when anonymous

        Returns:
            CommunityDetail with isMember and isAdmin flags

        Raises:
            CommunityNotFoundException: If no community has this slug
        """
        community = CommunityService.get_community(db, slug)
        is_member, is_admin = AccessPolicyService.membership_flags(
            db, community, user_id
        )
        return schemas.CommunityDetail(
            community=schemas.Community.model_validate(community),
            isMember=is_member,
            isAdmin=is_admin,
        )

    @staticmethod
    def update_community(
        db: Session, slug: str, update: schemas.CommunityUpdate, user_id: str
    ) -> db_models.Community:
        """
        Update allow-listed community settings.

        Only fields present in the payload are written. ``slug``, ``admin_id``
        and the counters are never touched.

        Args:
            db: Database session
            slug: Community slug
            update: Allow-listed fields
            user_id: Acting user

        Returns:
            Updated community

        Raises:
            CommunityNotFoundException: If no community has this slug
            InsufficientPermissionsException: If the user is not an admin
            ValidationException: If a required column would be cleared
        """
        community = CommunityService.get_community(db, slug)
        AccessPolicyService.require_community_admin(db, community, user_id)

        fields = sanitize_fields(
            update.model_dump(exclude_unset=True),
            COMMUNITY_TEXT_FIELDS,
            COMMUNITY_URL_FIELDS,
        )

        cleared = sorted(
            name
            for name in NON_NULLABLE_UPDATE_FIELDS & fields.keys()
            if fields[name] is None or fields[name] == ""
        )
        if cleared:
            raise ValidationException(f"Fields cannot be empty: {', '.join(cleared)}")

        center_lat = fields.get("center_lat", community.center_lat)
        center_lng = fields.get("center_lng", community.center_lng)
        if not is_valid_coordinate(center_lat, center_lng):
            raise InvalidCoordinatesException(center_lat, center_lng)

        was_active = community.is_active
        for field, value in fields.items():
            setattr(community, field, value)

        if "center_lat" in fields or "center_lng" in fields:
            community.location = to_wkt_point(center_lat, center_lng)
        community.updated_at = datetime.now(timezone.utc)

        community = CommunityRepository(db).save(community)

        if was_active != community.is_active:
            logger.info(
                f"Community {'enabled' if community.is_active else 'disabled'}: "
                f"slug={slug}, by={user_id}"
            )
        return community

    @staticmethod
    def join_community(
        db: Session, slug: str, user_id: str
    ) -> tuple[db_models.MemberRole, bool]:
        """
        Join a community as a member.

        Joining twice is a no-op, and so is the creator joining their own
        community.

        Args:
            db: Database session
            slug: Community slug
            user_id: Acting user

        Returns:
            Tuple of (role, created) where created is False when the user
            already belonged to the community

        Raises:
            CommunityNotFoundException: If no community has this slug
            CommunityInactiveException: If the community is disabled
        """
        community = CommunityService.get_community(db, slug)
        if not community.is_active:
            raise CommunityInactiveException()

        member_repo = CommunityMemberRepository(db)
        membership = member_repo.get_membership(community.id, user_id)
        if membership is not None:
            return membership.role, False

        if community.admin_id == user_id:
            return db_models.MemberRole.ADMIN, False

        membership = db_models.CommunityMember(
            community_id=community.id,
            user_id=user_id,
            role=db_models.MemberRole.MEMBER,
            status=db_models.MemberStatus.ACTIVE,
        )
        member_repo.add(membership)
        CommunityRepository(db).adjust_member_count(community, 1)
        try:
            member_repo.commit()
        except IntegrityError:
            # Concurrent join inserted the row first
            member_repo.rollback()
            existing = member_repo.get_membership(community.id, user_id)
            if existing is None:
                raise
            return existing.role, False

        logger.info(f"Member joined: community={slug}, user={user_id}")
        return db_models.MemberRole.MEMBER, True

    @staticmethod
    def get_community_statistics(
        db: Session, slug: str
    ) -> schemas.CommunityStatistics:
        """
        Get report counts of a community, total and per status.

        Raises:
            CommunityNotFoundException: If no community has this slug
        """
        community = CommunityService.get_community(db, slug)
        report_repo = ReportRepository(db)
        counts = {
            status: report_repo.count_by_status(community.id, status)
            for status in db_models.ReportStatus
        }
        return schemas.CommunityStatistics(
            community_id=community.id,
            total_reports=sum(counts.values()),
            pending_reports=counts[db_models.ReportStatus.PENDING],
            acknowledged_reports=counts[db_models.ReportStatus.ACKNOWLEDGED],
            in_progress_reports=counts[db_models.ReportStatus.IN_PROGRESS],
            resolved_reports=counts[db_models.ReportStatus.RESOLVED],
            closed_reports=counts[db_models.ReportStatus.CLOSED],
        )
