"""
Pytest configuration and fixtures for backend tests.
"""

import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Add backend directory to path for imports
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Set test environment variables before importing config
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only"
os.environ["CORS_ORIGINS"] = "http://localhost:3000"
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ.pop("AUTH_AUDIENCE", None)
os.environ.pop("SENTRY_DSN", None)

from authentication.auth import create_access_token  # noqa: E402
from repositories.database import Base, get_db  # noqa: E402
import repositories.db_models as db_models  # noqa: E402

# Auth-service user ids used across tests
ADMIN_ID = "user-admin"
MEMBER_ID = "user-member"
MEMBER_ADMIN_ID = "user-member-admin"
OUTSIDER_ID = "user-outsider"

# Test database engine (in-memory SQLite)
TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def auth_headers_for(user_id: str, expires_delta: timedelta | None = None) -> dict:
    """Authorization header carrying a session token for ``user_id``."""
    token = create_access_token(
        {"sub": user_id, "email": f"{user_id}@example.com"},
        expires_delta=expires_delta or timedelta(minutes=30),
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh in-memory database session for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """Create a test client with overridden database dependency."""
    from main import app
    from helpers.rate_limiter import limiter

    # Reset rate limiter storage before each test to prevent rate limit errors
    limiter.reset()

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers() -> dict:
    """Session of the community creator."""
    return auth_headers_for(ADMIN_ID)


@pytest.fixture
def member_headers() -> dict:
    return auth_headers_for(MEMBER_ID)


@pytest.fixture
def member_admin_headers() -> dict:
    return auth_headers_for(MEMBER_ADMIN_ID)


@pytest.fixture
def outsider_headers() -> dict:
    return auth_headers_for(OUTSIDER_ID)


@pytest.fixture
def expired_headers() -> dict:
    """Session of ADMIN_ID that expired five minutes ago."""
    return auth_headers_for(ADMIN_ID, expires_delta=timedelta(minutes=-5))


@pytest.fixture
def test_community(db_session) -> db_models.Community:
    """Create an active community administered by ADMIN_ID."""
    now = datetime.now(timezone.utc)
    community = db_models.Community(
        name="Test City",
        slug="test-city",
        description="A test community",
        category=db_models.CommunityCategory.CITY,
        center_lat=40.7128,
        center_lng=-74.006,
        location="POINT(-74.006 40.7128)",
        radius_km=5.0,
        admin_id=ADMIN_ID,
        member_count=1,
        report_count=0,
        created_at=now,
        updated_at=now,
    )
    db_session.add(community)
    db_session.commit()
    db_session.refresh(community)
    return community


@pytest.fixture
def test_member(db_session, test_community) -> db_models.CommunityMember:
    """MEMBER_ID joined test_community as a plain member."""
    membership = db_models.CommunityMember(
        community_id=test_community.id,
        user_id=MEMBER_ID,
        role=db_models.MemberRole.MEMBER,
    )
    test_community.member_count += 1
    db_session.add(membership)
    db_session.commit()
    db_session.refresh(membership)
    return membership


@pytest.fixture
def test_member_admin(db_session, test_community) -> db_models.CommunityMember:
    """MEMBER_ADMIN_ID holds an admin-role membership in test_community."""
    membership = db_models.CommunityMember(
        community_id=test_community.id,
        user_id=MEMBER_ADMIN_ID,
        role=db_models.MemberRole.ADMIN,
    )
    test_community.member_count += 1
    db_session.add(membership)
    db_session.commit()
    db_session.refresh(membership)
    return membership


def make_report(
    db_session,
    user_id: str,
    community: db_models.Community | None = None,
    title: str = "Pothole on Main St",
    created_at: datetime | None = None,
    status: db_models.ReportStatus = db_models.ReportStatus.PENDING,
) -> db_models.Report:
    """Insert a report directly, bumping the community counter."""
    now = created_at or datetime.now(timezone.utc)
    report = db_models.Report(
        title=title,
        description="Deep pothole near the crosswalk",
        category=db_models.ReportCategory.POTHOLE,
        status=status,
        lat=40.7130,
        lng=-74.0060,
        location="POINT(-74.006 40.713)",
        community_id=community.id if community is not None else None,
        user_id=user_id,
        created_at=now,
        updated_at=now,
    )
    if community is not None:
        community.report_count += 1
    db_session.add(report)
    db_session.commit()
    db_session.refresh(report)
    return report


@pytest.fixture
def test_report(db_session, test_community, test_member) -> db_models.Report:
    """Pending report filed by MEMBER_ID in test_community."""
    return make_report(db_session, MEMBER_ID, test_community)


@pytest.fixture
def report_factory(db_session):
    """Insert reports with ``report_factory(user_id, community, **overrides)``."""

    def factory(user_id: str, community=None, **kwargs) -> db_models.Report:
        return make_report(db_session, user_id, community, **kwargs)

    return factory
