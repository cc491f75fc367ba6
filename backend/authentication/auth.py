"""
Session reading.

Sign-up, login and token issuance are handled by the external auth service.
This module only verifies the session JWT it issued and turns the ``sub``
claim into a :class:`CurrentUser`. The token is read from the
``Authorization: Bearer`` header, falling back to the session cookie.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

import models.schemas as schemas
from models.config import settings
from models.exceptions import AuthenticationException

optional_bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Mint a session token the way the auth service does.

    Used by tests and local tooling; production tokens come from the auth
    service and share its secret.
    """
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=15)
    to_encode.update({"exp": expire})
    if settings.AUTH_AUDIENCE and "aud" not in to_encode:
        to_encode["aud"] = settings.AUTH_AUDIENCE
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_session_token(token: str) -> dict[str, Any]:
    """
    Verify signature, expiry and (optionally) audience of a session token.

    Raises:
        jwt.exceptions.InvalidTokenError: On any verification failure.
    """
    return jwt.decode(
        token,
        settings.SECRET_KEY,
        algorithms=[settings.ALGORITHM],
        audience=settings.AUTH_AUDIENCE,
        options={"verify_aud": settings.AUTH_AUDIENCE is not None},
    )


def _user_from_payload(payload: dict[str, Any]) -> schemas.CurrentUser | None:
    subject = payload.get("sub")
    if subject is None or str(subject) == "":
        return None
    return schemas.CurrentUser(
        id=str(subject),
        email=payload.get("email"),
        role=payload.get("role"),
    )


def _extract_token(
    request: Request, credentials: Optional[HTTPAuthorizationCredentials]
) -> str | None:
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(settings.SESSION_COOKIE_NAME) or None


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(
        optional_bearer_scheme
    ),
) -> schemas.CurrentUser:
    """
    Get the current user from the session.

    Raises:
        AuthenticationException: If there is no session or it is invalid.
    """
    token = _extract_token(request, credentials)
    if token is None:
        raise AuthenticationException("Unauthorized")

    try:
        payload = decode_session_token(token)
    except jwt.exceptions.ExpiredSignatureError:
        raise AuthenticationException("Session expired. Please log in again.")
    except jwt.exceptions.InvalidTokenError:
        raise AuthenticationException("Could not validate credentials")

    user = _user_from_payload(payload)
    if user is None:
        raise AuthenticationException("Could not validate credentials")
    return user


async def get_current_user_optional(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(
        optional_bearer_scheme
    ),
) -> Optional[schemas.CurrentUser]:
    """
    Get current user if a session is present, otherwise None.

    An expired session still raises AuthenticationException so the user
    knows to re-login; malformed tokens are treated as anonymous.
    """
    token = _extract_token(request, credentials)
    if token is None:
        return None

    try:
        payload = decode_session_token(token)
    except jwt.exceptions.ExpiredSignatureError:
        raise AuthenticationException("Session expired. Please log in again.")
    except jwt.exceptions.InvalidTokenError:
        return None

    return _user_from_payload(payload)
