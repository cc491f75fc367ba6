"""Initialize the database schema and optionally seed a demo community."""

import os
from datetime import datetime, timezone

from loguru import logger

from helpers.geo import to_wkt_point
from repositories.database import Base, SessionLocal, engine
from repositories.db_models import Community, CommunityCategory

DEMO_COMMUNITY = {
    "name": "Test City",
    "slug": "test-city",
    "description": "Demo community for local development",
    "category": CommunityCategory.CITY,
    "center_lat": 40.7128,
    "center_lng": -74.006,
    "address": "City Hall, New York, NY",
    "radius_km": 5.0,
}


def init_db(seed_demo: bool = True) -> None:
    """Create tables and, when asked, a demo community.

    The demo community is administered by ``DEMO_ADMIN_ID`` (an auth-service
    user id), so a developer can sign in as that user and triage reports.
    """
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")

    if not seed_demo:
        return

    db = SessionLocal()
    try:
        existing = (
            db.query(Community)
            .filter(Community.slug == DEMO_COMMUNITY["slug"])
            .first()
        )
        if existing:
            logger.info("Demo community already present, skipping seed")
            return

        now = datetime.now(timezone.utc)
        community = Community(
            **DEMO_COMMUNITY,
            location=to_wkt_point(
                DEMO_COMMUNITY["center_lat"], DEMO_COMMUNITY["center_lng"]
            ),
            admin_id=os.getenv("DEMO_ADMIN_ID", "demo-admin"),
            member_count=1,
            report_count=0,
            created_at=now,
            updated_at=now,
        )
        db.add(community)
        db.commit()
        logger.info(f"Demo community created: /communities/{community.slug}")
    except Exception:
        db.rollback()
        logger.exception("Error initializing database")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    init_db(seed_demo=os.getenv("SEED_DEMO", "1") not in ("0", "false", "False"))
