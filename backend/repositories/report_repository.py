"""
Report repository for database operations.
"""

from typing import List, Optional

from sqlalchemy.orm import Session

import repositories.db_models as db_models

from .base import BaseRepository


class ReportRepository(BaseRepository[db_models.Report]):
    """Repository for Report entity database operations."""

    def __init__(self, db: Session):
        super().__init__(db_models.Report, db)

    def get_in_community(
        self, report_id: int, community_id: int
    ) -> db_models.Report | None:
        """
        Get a report only if it belongs to the given community.

        Args:
            report_id: Report ID
            community_id: Community ID the report must be scoped to

        Returns:
            Report if found in that community, None otherwise
        """
        return (
            self.db.query(db_models.Report)
            .filter(
                db_models.Report.id == report_id,
                db_models.Report.community_id == community_id,
            )
            .first()
        )

    def get_by_community(self, community_id: int) -> List[db_models.Report]:
        """Get all reports of a community, oldest first."""
        return (
            self.db.query(db_models.Report)
            .filter(db_models.Report.community_id == community_id)
            .order_by(db_models.Report.created_at.asc(), db_models.Report.id.asc())
            .all()
        )

    def get_all_oldest_first(
        self,
        status: Optional[db_models.ReportStatus] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[db_models.Report]:
        """
        Get reports across all communities, oldest first.

        Args:
            status: Optional status filter
            skip: Number of records to skip
            limit: Maximum number of records to return
        """
        query = self.db.query(db_models.Report)
        if status is not None:
            query = query.filter(db_models.Report.status == status)
        return (
            query.order_by(db_models.Report.created_at.asc(), db_models.Report.id.asc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count_by_status(self, community_id: int, status: db_models.ReportStatus) -> int:
        """Count reports of a community in a given status."""
        return (
            self.db.query(db_models.Report)
            .filter(
                db_models.Report.community_id == community_id,
                db_models.Report.status == status,
            )
            .count()
        )

    def increment_views(self, report: db_models.Report) -> db_models.Report:
        """Bump the view counter and commit."""
        report.view_count = (report.view_count or 0) + 1
        return self.save(report)
