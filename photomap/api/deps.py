"""Common API dependencies: current user extraction, viewport parsing."""

import jwt
from fastapi import Depends, HTTPException, Query, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from photomap.database import get_session
from photomap.models.user import User
from photomap.services.access_scope import Bounds
from photomap.utils.security import decode_token

bearer_scheme = HTTPBearer()


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> User:
    """Extract and validate user from JWT access token."""
    try:
        payload = decode_token(credentials.credentials)
    except jwt.PyJWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )

    if payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type",
        )

    user = session.get(User, payload.get("sub"))
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return user


def get_viewport_bounds(
    min_lat: float = Query(..., alias="minLat"),
    max_lat: float = Query(..., alias="maxLat"),
    min_lng: float = Query(..., alias="minLng"),
    max_lng: float = Query(..., alias="maxLng"),
) -> Bounds:
    """Parse the viewport box; rejects NaN/inf, inverted or off-globe boxes."""
    try:
        return Bounds(min_lat, max_lat, min_lng, max_lng)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid bounds",
        )
