"""Tests for CommunityRepository."""

from datetime import datetime, timedelta, timezone

import repositories.db_models as db_models
from repositories.community_repository import CommunityRepository


def _community(slug: str, created_at: datetime) -> db_models.Community:
    return db_models.Community(
        name=slug.replace("-", " ").title(),
        slug=slug,
        center_lat=45.5,
        center_lng=-73.56,
        radius_km=5.0,
        admin_id="user-admin",
        member_count=1,
        created_at=created_at,
        updated_at=created_at,
    )


class TestCommunityRepository:
    """Test cases for CommunityRepository."""

    def test_get_by_slug(self, db_session, test_community):
        repo = CommunityRepository(db_session)
        assert repo.get_by_slug("test-city").id == test_community.id
        assert repo.get_by_slug("nowhere") is None

    def test_slug_exists(self, db_session, test_community):
        repo = CommunityRepository(db_session)
        assert repo.slug_exists("test-city")
        assert not repo.slug_exists("test")

    def test_slugs_with_prefix(self, db_session, test_community):
        now = datetime.now(timezone.utc)
        repo = CommunityRepository(db_session)
        repo.add(_community("test-city-2", now))
        repo.add(_community("test-cityscape", now))
        repo.commit()

        # "test-cityscape" does not share the hyphenated prefix
        assert repo.slugs_with_prefix("test-city") == {"test-city", "test-city-2"}

    def test_get_all_newest_first(self, db_session):
        now = datetime.now(timezone.utc)
        repo = CommunityRepository(db_session)
        repo.add(_community("oldest", now - timedelta(days=2)))
        repo.add(_community("newest", now))
        repo.add(_community("middle", now - timedelta(days=1)))
        repo.commit()

        slugs = [c.slug for c in repo.get_all_newest_first()]
        assert slugs == ["newest", "middle", "oldest"]

    def test_get_all_newest_first_paginates(self, db_session):
        now = datetime.now(timezone.utc)
        repo = CommunityRepository(db_session)
        for i in range(5):
            repo.add(_community(f"c-{i}", now - timedelta(hours=i)))
        repo.commit()

        page = repo.get_all_newest_first(skip=1, limit=2)
        assert [c.slug for c in page] == ["c-1", "c-2"]

    def test_counters_never_negative(self, db_session, test_community):
        repo = CommunityRepository(db_session)
        repo.adjust_report_count(test_community, -1)
        repo.adjust_member_count(test_community, -5)
        repo.commit()

        db_session.refresh(test_community)
        assert test_community.report_count == 0
        assert test_community.member_count == 0

    def test_adjust_does_not_commit(self, db_session, test_community):
        repo = CommunityRepository(db_session)
        repo.adjust_member_count(test_community, 1)
        repo.rollback()

        db_session.refresh(test_community)
        assert test_community.member_count == 1
