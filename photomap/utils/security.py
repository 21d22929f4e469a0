"""Security utilities: JWT access tokens."""

from datetime import datetime, timedelta, timezone

import jwt

from photomap.config import settings


def create_access_token(user_id: str, expires_minutes: int | None = None) -> str:
    """Mint an access token. Production tokens come from the auth service; this mirrors its format."""
    minutes = settings.access_token_expire_minutes if expires_minutes is None else expires_minutes
    expire = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    payload = {
        "sub": user_id,
        "exp": expire,
        "type": "access",
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    """Decode and validate a JWT token. Raises jwt.PyJWTError on failure."""
    return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
