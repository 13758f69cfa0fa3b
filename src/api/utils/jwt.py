from datetime import UTC, datetime, timedelta
from typing import Optional
from uuid import UUID

from jose import JWTError, jwt

from config import ApplicationConfig

ALGORITHM = "HS256"
ACCESS_TOKEN_TTL = timedelta(minutes=15)


def generate_jwt(user_id: UUID, tenant_id: UUID, role: str) -> str:
    """
    Issue a user access token.

    Claims: user_id, tenant_id (the caller's organization), role
    (owner, admin, member, viewer). Expires after 15 minutes.
    """
    now = datetime.now(UTC)
    payload = {
        "user_id": str(user_id),
        "tenant_id": str(tenant_id),
        "role": role,
        "exp": now + ACCESS_TOKEN_TTL,
        "iat": now,
    }
    return jwt.encode(payload, ApplicationConfig.JWT_SECRET, algorithm=ALGORITHM)


def verify_jwt(token: str) -> Optional[dict]:
    """Decoded claims, or None for a bad signature or expired token"""
    try:
        return jwt.decode(token, ApplicationConfig.JWT_SECRET, algorithms=[ALGORITHM])
    except JWTError:
        return None
