from datetime import UTC, datetime
from typing import Optional

from libs.result import Error
from src.domain.entities import MembershipRole

ADMIN_ROLES = (MembershipRole.owner.value, MembershipRole.admin.value)


def require_admin_role(role: str, action: str) -> Optional[Error]:
    """Error for callers that are neither owner nor admin, else None"""
    if role not in ADMIN_ROLES:
        return Error("INSUFFICIENT_ROLE", f"You do not have permission to {action}")
    return None


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Query bounds without an offset are read as UTC"""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value
