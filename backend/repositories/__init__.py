"""
Repository pattern implementation for data access layer.
"""

from .base import BaseRepository
from .community_member_repository import CommunityMemberRepository
from .community_repository import CommunityRepository
from .report_repository import ReportRepository
from .report_upvote_repository import ReportUpvoteRepository

__all__ = [
    "BaseRepository",
    "CommunityMemberRepository",
    "CommunityRepository",
    "ReportRepository",
    "ReportUpvoteRepository",
]
