"""
Access Policy Service

Decides what a user may do with a community and its reports. Community
updates and report updates/deletes all go through :func:`resolve_access`
so every path applies the same rule.
"""

import enum
from typing import Optional

from sqlalchemy.orm import Session

import repositories.db_models as db_models
from models.exceptions import InsufficientPermissionsException
from repositories.community_member_repository import CommunityMemberRepository


class AccessLevel(str, enum.Enum):
    """Standing of a user relative to a community (and optionally a report)."""

    OWNER = "owner"  # created the report
    COMMUNITY_ADMIN = "community_admin"  # holds the community's admin_id
    MEMBER_ADMIN = "member_admin"  # membership row with role admin
    MEMBER = "member"  # plain membership row
    NONE = "none"


COMMUNITY_ADMIN_LEVELS = frozenset(
    {AccessLevel.COMMUNITY_ADMIN, AccessLevel.MEMBER_ADMIN}
)
MEMBER_LEVELS = COMMUNITY_ADMIN_LEVELS | {AccessLevel.MEMBER}
REPORT_EDITOR_LEVELS = frozenset(
    {AccessLevel.OWNER, AccessLevel.COMMUNITY_ADMIN, AccessLevel.MEMBER_ADMIN}
)


class AccessPolicyService:
    """Service resolving access levels and enforcing them."""

    @staticmethod
    def resolve_access(
        db: Session,
        community: Optional[db_models.Community],
        user_id: Optional[str],
        report: Optional[db_models.Report] = None,
    ) -> AccessLevel:
        """
        Resolve the highest standing of a user.

        Checked in order: report owner, community admin_id holder, admin-role
        member, plain member.

        Args:
            db: Database session
            community: Community in scope, None for unscoped reports
            user_id: Requesting user, None when anonymous
            report: Report in scope, if the check is about a report

        Returns:
            The matching AccessLevel
        """
        if not user_id:
            return AccessLevel.NONE

        if report is not None and report.user_id == user_id:
            return AccessLevel.OWNER

        if community is None:
            return AccessLevel.NONE

        if community.admin_id == user_id:
            return AccessLevel.COMMUNITY_ADMIN

        membership = CommunityMemberRepository(db).get_membership(
            int(community.id), user_id
        )
        if membership is None:
            return AccessLevel.NONE
        if membership.role == db_models.MemberRole.ADMIN:
            return AccessLevel.MEMBER_ADMIN
        return AccessLevel.MEMBER

    @staticmethod
    def membership_flags(
        db: Session, community: db_models.Community, user_id: Optional[str]
    ) -> tuple[bool, bool]:
        """
        Compute ``(is_member, is_admin)`` for the community detail view.

        A user is a member with a membership row or as the admin_id holder,
        and an admin as the admin_id holder or with an admin-role row.
        """
        level = AccessPolicyService.resolve_access(db, community, user_id)
        return (
            AccessPolicyService.is_member(level),
            AccessPolicyService.can_administer_community(level),
        )

    @staticmethod
    def is_member(level: AccessLevel) -> bool:
        """A bare report OWNER has no standing in the community."""
        return level in MEMBER_LEVELS

    @staticmethod
    def can_administer_community(level: AccessLevel) -> bool:
        return level in COMMUNITY_ADMIN_LEVELS

    @staticmethod
    def can_modify_report(level: AccessLevel) -> bool:
        return level in REPORT_EDITOR_LEVELS

    @staticmethod
    def require_community_admin(
        db: Session, community: db_models.Community, user_id: str
    ) -> AccessLevel:
        """
        Ensure the user may administer the community.

        Raises:
            InsufficientPermissionsException: If the user is not an admin
        """
        level = AccessPolicyService.resolve_access(db, community, user_id)
        if not AccessPolicyService.can_administer_community(level):
            raise InsufficientPermissionsException("Forbidden: Admin access required")
        return level

    @staticmethod
    def require_report_editor(
        db: Session,
        community: Optional[db_models.Community],
        report: db_models.Report,
        user_id: str,
        action: str = "update",
    ) -> AccessLevel:
        """
        Ensure the user may update or delete the report.

        Raises:
            InsufficientPermissionsException: If the user is neither the
                owner nor an admin of the report's community
        """
        level = AccessPolicyService.resolve_access(db, community, user_id, report)
        if not AccessPolicyService.can_modify_report(level):
            raise InsufficientPermissionsException(
                f"Forbidden: Not authorized to {action} this report"
            )
        return level
