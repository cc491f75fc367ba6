"""
Database models using SQLAlchemy 2.0 style with Mapped type hints.

User ids are the opaque string identifiers issued by the external auth
service (the JWT ``sub`` claim); there is no local users table.
"""

import enum
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from repositories.database import Base


class CommunityCategory(str, enum.Enum):
    CITY = "city"
    NEIGHBORHOOD = "neighborhood"
    DISTRICT = "district"
    CAMPUS = "campus"
    REGION = "region"


class MemberRole(str, enum.Enum):
    MEMBER = "member"
    ADMIN = "admin"


class MemberStatus(str, enum.Enum):
    ACTIVE = "active"


class ReportStatus(str, enum.Enum):
    """Canonical report lifecycle. No transition table is enforced."""

    PENDING = "pending"
    ACKNOWLEDGED = "acknowledged"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class ReportCategory(str, enum.Enum):
    POTHOLE = "pothole"
    STREETLIGHT = "streetlight"
    TRASH = "trash"
    GRAFFITI = "graffiti"
    OTHER = "other"


class ReportPriority(str, enum.Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


def _utc_now() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


class Community(Base):
    __tablename__ = "communities"
    __table_args__ = (
        Index("ix_communities_created_at", "created_at"),
        Index("ix_communities_admin", "admin_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    slug: Mapped[str] = mapped_column(
        String(80), unique=True, index=True, nullable=False
    )
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[CommunityCategory] = mapped_column(
        Enum(CommunityCategory), default=CommunityCategory.CITY, nullable=False
    )
    center_lat: Mapped[float] = mapped_column(Float, nullable=False)
    center_lng: Mapped[float] = mapped_column(Float, nullable=False)
    location: Mapped[Optional[str]] = mapped_column(
        String(64), nullable=True, doc="WKT POINT(lng lat) of the center"
    )
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    radius_km: Mapped[float] = mapped_column(Float, default=5.0, nullable=False)
    icon_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)
    banner_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)
    admin_id: Mapped[str] = mapped_column(String(64), nullable=False)

    # Denormalized counters
    member_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    report_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    is_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)

    # Relationships (communities are soft-disabled, never deleted)
    members: Mapped[List["CommunityMember"]] = relationship(
        "CommunityMember", back_populates="community"
    )
    reports: Mapped[List["Report"]] = relationship(
        "Report", back_populates="community"
    )


class CommunityMember(Base):
    __tablename__ = "community_members"
    __table_args__ = (
        UniqueConstraint(
            "community_id", "user_id", name="uq_community_member_community_user"
        ),
        Index("ix_community_members_user", "user_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    community_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("communities.id"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    role: Mapped[MemberRole] = mapped_column(
        Enum(MemberRole), default=MemberRole.MEMBER, nullable=False
    )
    status: Mapped[MemberStatus] = mapped_column(
        Enum(MemberStatus), default=MemberStatus.ACTIVE, nullable=False
    )
    joined_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)

    community: Mapped["Community"] = relationship(
        "Community", back_populates="members"
    )


class Report(Base):
    __tablename__ = "reports"
    __table_args__ = (
        Index("ix_reports_community_created", "community_id", "created_at"),
        Index("ix_reports_status", "status"),
        Index("ix_reports_user", "user_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[ReportCategory] = mapped_column(
        Enum(ReportCategory), nullable=False
    )
    status: Mapped[ReportStatus] = mapped_column(
        Enum(ReportStatus), default=ReportStatus.PENDING, nullable=False
    )
    priority: Mapped[ReportPriority] = mapped_column(
        Enum(ReportPriority), default=ReportPriority.NORMAL, nullable=False
    )
    lat: Mapped[float] = mapped_column(Float, nullable=False)
    lng: Mapped[float] = mapped_column(Float, nullable=False)
    location: Mapped[Optional[str]] = mapped_column(
        String(64), nullable=True, doc="WKT POINT(lng lat) of the report"
    )
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)
    community_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("communities.id"), nullable=True
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)

    # One-way latch: set on the first transition to RESOLVED
    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    resolution_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    upvote_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    view_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)

    community: Mapped[Optional["Community"]] = relationship(
        "Community", back_populates="reports"
    )
    upvotes: Mapped[List["ReportUpvote"]] = relationship(
        "ReportUpvote", back_populates="report", cascade="all, delete-orphan"
    )


class ReportUpvote(Base):
    """One upvote per user per report."""

    __tablename__ = "report_upvotes"
    __table_args__ = (
        UniqueConstraint("report_id", "user_id", name="uq_report_upvote_report_user"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    report_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("reports.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)

    report: Mapped["Report"] = relationship("Report", back_populates="upvotes")
