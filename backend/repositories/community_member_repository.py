"""
Community membership repository for database operations.
"""

from sqlalchemy.orm import Session

import repositories.db_models as db_models

from .base import BaseRepository


class CommunityMemberRepository(BaseRepository[db_models.CommunityMember]):
    """Repository for CommunityMember entity database operations."""

    def __init__(self, db: Session):
        super().__init__(db_models.CommunityMember, db)

    def get_membership(
        self, community_id: int, user_id: str
    ) -> db_models.CommunityMember | None:
        """
        Get the membership row of a user in a community.

        Args:
            community_id: Community ID
            user_id: Auth-service user id

        Returns:
            Membership if the user joined, None otherwise
        """
        return (
            self.db.query(db_models.CommunityMember)
            .filter(
                db_models.CommunityMember.community_id == community_id,
                db_models.CommunityMember.user_id == user_id,
            )
            .first()
        )

