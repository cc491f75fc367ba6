"""Unit tests for init_db functionality."""

import pytest
from sqlalchemy.orm import sessionmaker

import init_db as init_db_module
from repositories.db_models import Community


@pytest.fixture
def bound_init_db(monkeypatch, db_session):
    """Point init_db at the test database."""
    bind = db_session.get_bind()
    monkeypatch.setattr(init_db_module, "engine", bind)
    monkeypatch.setattr(init_db_module, "SessionLocal", sessionmaker(bind=bind))
    return init_db_module.init_db


class TestInitDb:
    def test_seeds_demo_community(self, bound_init_db, db_session, monkeypatch):
        monkeypatch.setenv("DEMO_ADMIN_ID", "dev-user")

        bound_init_db()

        community = db_session.query(Community).filter_by(slug="test-city").one()
        assert community.admin_id == "dev-user"
        assert community.member_count == 1
        assert community.location == "POINT(-74.006 40.7128)"

    def test_seed_is_idempotent(self, bound_init_db, db_session):
        bound_init_db()
        bound_init_db()

        assert db_session.query(Community).count() == 1

    def test_schema_only(self, bound_init_db, db_session):
        bound_init_db(seed_demo=False)

        assert db_session.query(Community).count() == 0
