"""
Services layer for business logic.

This package contains service modules that encapsulate business logic
separate from the API routes.
"""

from .access_policy_service import AccessLevel, AccessPolicyService
from .community_service import CommunityService
from .report_service import ReportService

__all__ = [
    "AccessLevel",
    "AccessPolicyService",
    "CommunityService",
    "ReportService",
]
