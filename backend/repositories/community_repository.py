"""
Community repository for database operations.
"""

from typing import List

from sqlalchemy.orm import Session

import repositories.db_models as db_models

from .base import BaseRepository


class CommunityRepository(BaseRepository[db_models.Community]):
    """Repository for Community entity database operations."""

    def __init__(self, db: Session):
        super().__init__(db_models.Community, db)

    def get_by_slug(self, slug: str) -> db_models.Community | None:
        """
        Get community by its unique slug.

        Args:
            slug: URL slug

        Returns:
            Community if found, None otherwise
        """
        return (
            self.db.query(db_models.Community)
            .filter(db_models.Community.slug == slug)
            .first()
        )

    def slug_exists(self, slug: str) -> bool:
        """Check whether a slug is already taken."""
        return (
            self.db.query(db_models.Community.id)
            .filter(db_models.Community.slug == slug)
            .first()
            is not None
        )

    def slugs_with_prefix(self, prefix: str) -> set[str]:
        """Return every slug equal to ``prefix`` or starting with ``prefix-``."""
        rows = (
            self.db.query(db_models.Community.slug)
            .filter(
                (db_models.Community.slug == prefix)
                | (db_models.Community.slug.like(f"{prefix}-%"))
            )
            .all()
        )
        return {row.slug for row in rows}

    def get_all_newest_first(
        self, skip: int = 0, limit: int = 100
    ) -> List[db_models.Community]:
        """
        Get communities ordered by creation time, newest first.

        Args:
            skip: Number of records to skip
            limit: Maximum number of records to return
        """
        return (
            self.db.query(db_models.Community)
            .order_by(db_models.Community.created_at.desc(), db_models.Community.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_all(self) -> List[db_models.Community]:
        """Get every community (used for distance ranking)."""
        return self.db.query(db_models.Community).all()

    def adjust_member_count(self, community: db_models.Community, delta: int) -> None:
        """Shift the denormalized member counter without committing."""
        community.member_count = max(0, (community.member_count or 0) + delta)

    def adjust_report_count(self, community: db_models.Community, delta: int) -> None:
        """Shift the denormalized report counter without committing."""
        community.report_count = max(0, (community.report_count or 0) + delta)
