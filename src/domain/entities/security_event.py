"""
SecurityEvent Entity

In-memory record of a security-relevant occurrence.
"""

import secrets
import string
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from .enums import SecurityEventType, SecuritySeverity

_ID_ALPHABET = string.ascii_lowercase + string.digits


def random_suffix(length: int = 9) -> str:
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(length))


def generate_event_id(now: datetime) -> str:
    return f"sec_{int(now.timestamp() * 1000)}_{random_suffix()}"


class SecurityEvent(BaseModel):
    """
    SecurityEvent entity - one entry of the in-memory security event store.

    Business Rules:
    - id and timestamp are fixed at creation
    - Only `resolved` changes after creation (via resolve)
    - Evicted by the retention sweep or by the store's hard cap
    """

    id: str = Field(frozen=True)
    type: SecurityEventType
    severity: SecuritySeverity
    source: str
    description: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(frozen=True)
    resolved: bool = False

    user_id: Optional[str] = None
    organization_id: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    endpoint: Optional[str] = None

    def resolve(self) -> None:
        self.resolved = True


class RequestContext(BaseModel):
    """Request attributes copied onto events and usage records"""

    ip_address: str = "unknown"
    user_agent: Optional[str] = None
    user_id: Optional[str] = None
    organization_id: Optional[str] = None
    endpoint: Optional[str] = None
    method: Optional[str] = None
