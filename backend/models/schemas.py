from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from repositories.db_models import (
    CommunityCategory,
    MemberRole,
    ReportCategory,
    ReportPriority,
    ReportStatus,
)


def _normalize_status(value: object) -> object:
    """Accept the legacy dashboard spelling ``in-progress``."""
    if isinstance(value, str):
        return value.strip().lower().replace("-", "_")
    return value


# Session Schemas
class CurrentUser(BaseModel):
    """User resolved from a session token issued by the auth service."""

    id: str
    email: Optional[str] = None
    role: Optional[str] = None


# Community Schemas
class CommunityCreate(BaseModel):
    """
    Payload for creating a community.

    Required fields are checked by the service so that a missing name or
    coordinate yields a 400 with a readable message. Both the frontend's
    camelCase upload fields and snake_case are accepted.
    """

    name: Optional[str] = Field(default=None, max_length=120)
    description: Optional[str] = None
    center_lat: Optional[float] = None
    center_lng: Optional[float] = None
    address: Optional[str] = None
    radius_km: Optional[float] = Field(default=None, gt=0, le=500)
    category: CommunityCategory = CommunityCategory.CITY
    slug: Optional[str] = Field(default=None, max_length=80)
    icon_url: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("icon_url", "iconUrl")
    )
    banner_url: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("banner_url", "bannerUrl")
    )

    model_config = ConfigDict(extra="ignore")


class CommunityUpdate(BaseModel):
    """Allow-listed mutable community fields. Anything else is dropped."""

    name: Optional[str] = Field(default=None, max_length=120)
    description: Optional[str] = None
    center_lat: Optional[float] = None
    center_lng: Optional[float] = None
    address: Optional[str] = None
    radius_km: Optional[float] = Field(default=None, gt=0, le=500)
    icon_url: Optional[str] = None
    banner_url: Optional[str] = None
    category: Optional[CommunityCategory] = None
    is_active: Optional[bool] = None

    model_config = ConfigDict(extra="ignore")


class Community(BaseModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    category: CommunityCategory
    center_lat: float
    center_lng: float
    location: Optional[str] = None
    address: Optional[str] = None
    radius_km: float
    icon_url: Optional[str] = None
    banner_url: Optional[str] = None
    admin_id: str
    member_count: int
    report_count: int
    is_verified: bool
    is_active: bool
    created_at: datetime
    updated_at: datetime
    distance_km: Optional[float] = None

    model_config = ConfigDict(from_attributes=True)


class CommunityDetail(BaseModel):
    """Community plus the requesting user's standing in it."""

    community: Community
    isMember: bool
    isAdmin: bool


class CommunityEnvelope(BaseModel):
    community: Community


class JoinResponse(BaseModel):
    joined: bool = True
    role: MemberRole


class CommunityStatistics(BaseModel):
    community_id: int
    total_reports: int
    pending_reports: int
    acknowledged_reports: int
    in_progress_reports: int
    resolved_reports: int
    closed_reports: int


# Report Schemas
class ReportCreate(BaseModel):
    """
    Payload for submitting a report into a community.

    Field names follow the report form (``latitude``, ``longitude``,
    ``imageUrl``); snake_case ``image_url`` is accepted too.
    """

    title: Optional[str] = Field(default=None, max_length=200)
    description: Optional[str] = None
    category: Optional[ReportCategory] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    image_url: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("image_url", "imageUrl")
    )
    address: Optional[str] = None
    priority: ReportPriority = ReportPriority.NORMAL

    model_config = ConfigDict(extra="ignore")


class StandaloneReportCreate(ReportCreate):
    """Report submitted through the community-agnostic endpoint."""

    community_slug: Optional[str] = None


class ReportUpdate(BaseModel):
    """Allow-listed mutable report fields. Anything else is dropped."""

    title: Optional[str] = Field(default=None, max_length=200)
    description: Optional[str] = None
    category: Optional[ReportCategory] = None
    status: Optional[ReportStatus] = None
    priority: Optional[ReportPriority] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    address: Optional[str] = None
    image_url: Optional[str] = None
    resolution_notes: Optional[str] = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, value: object) -> object:
        return _normalize_status(value)


class ReportStatusUpdate(BaseModel):
    """Status-only update sent by the admin dashboard."""

    status: Optional[ReportStatus] = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, value: object) -> object:
        return _normalize_status(value)


class Report(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    category: ReportCategory
    status: ReportStatus
    priority: ReportPriority
    lat: float
    lng: float
    location: Optional[str] = None
    address: Optional[str] = None
    image_url: Optional[str] = None
    community_id: Optional[int] = None
    user_id: str
    resolved_at: Optional[datetime] = None
    resolution_notes: Optional[str] = None
    upvote_count: int
    view_count: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ReportEnvelope(BaseModel):
    report: Report


class ReportMutationResponse(BaseModel):
    success: bool = True
    report: Report


class ReportDataResponse(BaseModel):
    success: bool = True
    data: Report


class ReportListResponse(BaseModel):
    data: List[Report]


class SuccessResponse(BaseModel):
    success: bool = True


class UpvoteResponse(BaseModel):
    upvoted: bool = True
    upvote_count: int
