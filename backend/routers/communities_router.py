from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
from helpers.pagination import DEFAULT_LIMIT, PaginationLimit, PaginationSkip
from helpers.rate_limiter import CREATE_COMMUNITY_LIMIT, INTERACTION_LIMIT, limiter
from repositories.database import get_db
from services import CommunityService

router = APIRouter(prefix="/communities", tags=["communities"])


@router.get("", response_model=List[schemas.Community])
def list_communities(
    lat: Optional[float] = Query(None, description="Viewer latitude"),
    lng: Optional[float] = Query(None, description="Viewer longitude"),
    skip: PaginationSkip = 0,
    limit: PaginationLimit = DEFAULT_LIMIT,
    db: Session = Depends(get_db),
):
    """
    List communities, newest first.

    With both ``lat`` and ``lng`` every community gets a ``distance_km`` and
    the list is ordered nearest first.
    """
    return CommunityService.list_communities(db, lat, lng, skip, limit)


@router.post("", response_model=schemas.Community)
@limiter.limit(CREATE_COMMUNITY_LIMIT)
def create_community(
    request: Request,
    community: schemas.CommunityCreate,
    db: Session = Depends(get_db),
    current_user: schemas.CurrentUser = Depends(auth.get_current_user),
):
    """
    Create a community. The caller becomes its administrator.

    Domain exceptions are caught by centralized exception handlers.
    """
    return CommunityService.create_community(db, community, current_user.id)


@router.get("/{slug}", response_model=schemas.CommunityDetail)
def get_community(
    slug: str,
    db: Session = Depends(get_db),
    current_user: Optional[schemas.CurrentUser] = Depends(
        auth.get_current_user_optional
    ),
):
    """Get a community with the caller's membership flags."""
    user_id = current_user.id if current_user else None
    return CommunityService.get_community_by_slug(db, slug, user_id)


@router.patch("/{slug}", response_model=schemas.CommunityEnvelope)
def update_community(
    slug: str,
    update: schemas.CommunityUpdate,
    db: Session = Depends(get_db),
    current_user: schemas.CurrentUser = Depends(auth.get_current_user),
):
    """Update community settings (admins only)."""
    community = CommunityService.update_community(db, slug, update, current_user.id)
    return {"community": community}


@router.post("/{slug}/join", response_model=schemas.JoinResponse)
@limiter.limit(INTERACTION_LIMIT)
def join_community(
    request: Request,
    response: Response,
    slug: str,
    db: Session = Depends(get_db),
    current_user: schemas.CurrentUser = Depends(auth.get_current_user),
):
    """
    Join a community.

    Returns 201 when a membership was created and 200 when the caller
    already belonged to the community.
    """
    role, created = CommunityService.join_community(db, slug, current_user.id)
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return schemas.JoinResponse(joined=True, role=role)


@router.get("/{slug}/stats", response_model=schemas.CommunityStatistics)
def get_community_statistics(slug: str, db: Session = Depends(get_db)):
    """Get report counts of a community per status."""
    return CommunityService.get_community_statistics(db, slug)
