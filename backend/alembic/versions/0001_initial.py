"""initial

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

Creates communities, community_members, reports and report_upvotes.
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "communities",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("slug", sa.String(length=80), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "category",
            sa.Enum(
                "CITY",
                "NEIGHBORHOOD",
                "DISTRICT",
                "CAMPUS",
                "REGION",
                name="communitycategory",
            ),
            nullable=False,
        ),
        sa.Column("center_lat", sa.Float(), nullable=False),
        sa.Column("center_lng", sa.Float(), nullable=False),
        sa.Column(
            "location",
            sa.String(length=64),
            nullable=True,
            comment="WKT POINT(lng lat) of the center",
        ),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("radius_km", sa.Float(), nullable=False),
        sa.Column("icon_url", sa.String(length=2048), nullable=True),
        sa.Column("banner_url", sa.String(length=2048), nullable=True),
        sa.Column(
            "admin_id",
            sa.String(length=64),
            nullable=False,
            comment="Auth-service user id of the creator",
        ),
        sa.Column("member_count", sa.Integer(), nullable=False),
        sa.Column("report_count", sa.Integer(), nullable=False),
        sa.Column("is_verified", sa.Boolean(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_communities_id", "communities", ["id"])
    op.create_index("ix_communities_slug", "communities", ["slug"], unique=True)
    op.create_index("ix_communities_created_at", "communities", ["created_at"])
    op.create_index("ix_communities_admin", "communities", ["admin_id"])

    op.create_table(
        "community_members",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("community_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("role", sa.Enum("MEMBER", "ADMIN", name="memberrole"), nullable=False),
        sa.Column("status", sa.Enum("ACTIVE", name="memberstatus"), nullable=False),
        sa.Column("joined_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["community_id"], ["communities.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "community_id", "user_id", name="uq_community_member_community_user"
        ),
    )
    op.create_index("ix_community_members_id", "community_members", ["id"])
    op.create_index("ix_community_members_user", "community_members", ["user_id"])

    op.create_table(
        "reports",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "category",
            sa.Enum(
                "POTHOLE",
                "STREETLIGHT",
                "TRASH",
                "GRAFFITI",
                "OTHER",
                name="reportcategory",
            ),
            nullable=False,
        ),
        sa.Column(
            "status",
            sa.Enum(
                "PENDING",
                "ACKNOWLEDGED",
                "IN_PROGRESS",
                "RESOLVED",
                "CLOSED",
                name="reportstatus",
            ),
            nullable=False,
        ),
        sa.Column(
            "priority",
            sa.Enum("LOW", "NORMAL", "HIGH", "URGENT", name="reportpriority"),
            nullable=False,
        ),
        sa.Column("lat", sa.Float(), nullable=False),
        sa.Column("lng", sa.Float(), nullable=False),
        sa.Column(
            "location",
            sa.String(length=64),
            nullable=True,
            comment="WKT POINT(lng lat) of the report",
        ),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("image_url", sa.String(length=2048), nullable=True),
        sa.Column("community_id", sa.Integer(), nullable=True),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column(
            "resolved_at",
            sa.DateTime(),
            nullable=True,
            comment="Set on the first transition to resolved, never overwritten",
        ),
        sa.Column("resolution_notes", sa.Text(), nullable=True),
        sa.Column("upvote_count", sa.Integer(), nullable=False),
        sa.Column("view_count", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["community_id"], ["communities.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_reports_id", "reports", ["id"])
    op.create_index(
        "ix_reports_community_created", "reports", ["community_id", "created_at"]
    )
    op.create_index("ix_reports_status", "reports", ["status"])
    op.create_index("ix_reports_user", "reports", ["user_id"])

    op.create_table(
        "report_upvotes",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("report_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["report_id"], ["reports.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("report_id", "user_id", name="uq_report_upvote_report_user"),
    )
    op.create_index("ix_report_upvotes_id", "report_upvotes", ["id"])


def downgrade():
    op.drop_index("ix_report_upvotes_id", table_name="report_upvotes")
    op.drop_table("report_upvotes")

    op.drop_index("ix_reports_user", table_name="reports")
    op.drop_index("ix_reports_status", table_name="reports")
    op.drop_index("ix_reports_community_created", table_name="reports")
    op.drop_index("ix_reports_id", table_name="reports")
    op.drop_table("reports")

    op.drop_index("ix_community_members_user", table_name="community_members")
    op.drop_index("ix_community_members_id", table_name="community_members")
    op.drop_table("community_members")

    op.drop_index("ix_communities_admin", table_name="communities")
    op.drop_index("ix_communities_created_at", table_name="communities")
    op.drop_index("ix_communities_slug", table_name="communities")
    op.drop_index("ix_communities_id", table_name="communities")
    op.drop_table("communities")
