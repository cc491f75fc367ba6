"""
Report upvote repository for database operations.
"""

from sqlalchemy.orm import Session

import repositories.db_models as db_models

from .base import BaseRepository


class ReportUpvoteRepository(BaseRepository[db_models.ReportUpvote]):
    """Repository for ReportUpvote entity database operations."""

    def __init__(self, db: Session):
        super().__init__(db_models.ReportUpvote, db)

    def get_upvote(self, report_id: int, user_id: str) -> db_models.ReportUpvote | None:
        """Get a user's upvote on a report, if any."""
        return (
            self.db.query(db_models.ReportUpvote)
            .filter(
                db_models.ReportUpvote.report_id == report_id,
                db_models.ReportUpvote.user_id == user_id,
            )
            .first()
        )

    def count_for_report(self, report_id: int) -> int:
        """Count upvote rows of a report."""
        return (
            self.db.query(db_models.ReportUpvote)
            .filter(db_models.ReportUpvote.report_id == report_id)
            .count()
        )
