"""Tests for AccessPolicyService."""

import pytest

from models.exceptions import InsufficientPermissionsException
from services.access_policy_service import AccessLevel, AccessPolicyService


class TestResolveAccess:
    """Access level resolution order."""

    def test_anonymous_is_none(self, db_session, test_community):
        assert (
            AccessPolicyService.resolve_access(db_session, test_community, None)
            == AccessLevel.NONE
        )

    def test_admin_id_holder(self, db_session, test_community):
        level = AccessPolicyService.resolve_access(
            db_session, test_community, "user-admin"
        )
        assert level == AccessLevel.COMMUNITY_ADMIN

    def test_admin_role_member(self, db_session, test_community, test_member_admin):
        level = AccessPolicyService.resolve_access(
            db_session, test_community, "user-member-admin"
        )
        assert level == AccessLevel.MEMBER_ADMIN

    def test_plain_member(self, db_session, test_community, test_member):
        level = AccessPolicyService.resolve_access(
            db_session, test_community, "user-member"
        )
        assert level == AccessLevel.MEMBER

    def test_outsider(self, db_session, test_community):
        level = AccessPolicyService.resolve_access(
            db_session, test_community, "user-outsider"
        )
        assert level == AccessLevel.NONE

    def test_report_owner_wins(self, db_session, test_community, test_report):
        """The reporter is OWNER even though they are also a member."""
        level = AccessPolicyService.resolve_access(
            db_session, test_community, "user-member", test_report
        )
        assert level == AccessLevel.OWNER

    def test_report_owner_without_community(self, db_session, report_factory):
        report = report_factory("user-outsider")
        assert (
            AccessPolicyService.resolve_access(db_session, None, "user-outsider", report)
            == AccessLevel.OWNER
        )
        assert (
            AccessPolicyService.resolve_access(db_session, None, "user-admin", report)
            == AccessLevel.NONE
        )


class TestMembershipFlags:
    """isMember / isAdmin flags of the community detail view."""

    @pytest.mark.parametrize(
        "user_id,expected",
        [
            (None, (False, False)),
            ("user-outsider", (False, False)),
            ("user-member", (True, False)),
            ("user-member-admin", (True, True)),
            ("user-admin", (True, True)),
        ],
    )
    def test_flags(
        self,
        db_session,
        test_community,
        test_member,
        test_member_admin,
        user_id,
        expected,
    ):
        assert (
            AccessPolicyService.membership_flags(db_session, test_community, user_id)
            == expected
        )


class TestPredicates:
    @pytest.mark.parametrize(
        "level,member,admin,editor",
        [
            (AccessLevel.OWNER, False, False, True),
            (AccessLevel.COMMUNITY_ADMIN, True, True, True),
            (AccessLevel.MEMBER_ADMIN, True, True, True),
            (AccessLevel.MEMBER, True, False, False),
            (AccessLevel.NONE, False, False, False),
        ],
    )
    def test_predicates(self, level, member, admin, editor):
        assert AccessPolicyService.is_member(level) is member
        assert AccessPolicyService.can_administer_community(level) is admin
        assert AccessPolicyService.can_modify_report(level) is editor


class TestRequire:
    def test_require_community_admin_rejects_member(
        self, db_session, test_community, test_member
    ):
        with pytest.raises(InsufficientPermissionsException):
            AccessPolicyService.require_community_admin(
                db_session, test_community, "user-member"
            )

    def test_require_community_admin_accepts_member_admin(
        self, db_session, test_community, test_member_admin
    ):
        level = AccessPolicyService.require_community_admin(
            db_session, test_community, "user-member-admin"
        )
        assert level == AccessLevel.MEMBER_ADMIN

    def test_require_report_editor_rejects_other_member(
        self, db_session, test_community, test_report
    ):
        with pytest.raises(InsufficientPermissionsException) as exc_info:
            AccessPolicyService.require_report_editor(
                db_session, test_community, test_report, "user-outsider", "delete"
            )
        assert "delete" in exc_info.value.message

    def test_require_report_editor_accepts_community_admin(
        self, db_session, test_community, test_report
    ):
        level = AccessPolicyService.require_report_editor(
            db_session, test_community, test_report, "user-admin"
        )
        assert level == AccessLevel.COMMUNITY_ADMIN
