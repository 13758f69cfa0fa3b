"""
Security Event Use Case DTOs (Data Transfer Objects)

Command and Response classes for the security event domain.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, IPvAnyAddress

from src.domain.entities import SecurityEvent, SecurityEventType, SecuritySeverity


# ============================================================================
# Command DTOs
# ============================================================================


class SecurityEventQuery(BaseModel):
    """Filters for listing security events"""

    type: Optional[SecurityEventType] = None
    severity: Optional[SecuritySeverity] = None
    resolved: Optional[bool] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    user_id: Optional[str] = None
    ip_address: Optional[str] = None
    limit: int = Field(default=100, ge=1, le=1000)
    offset: int = Field(default=0, ge=0)


class BlockIpCommand(BaseModel):
    """Block an address; duration defaults to the configured block length"""

    ip: IPvAnyAddress
    reason: str = Field(..., min_length=1, max_length=500)
    duration_seconds: Optional[int] = Field(default=None, ge=60, le=30 * 24 * 3600)


class LogSecurityEventCommand(BaseModel):
    """Report a security-relevant occurrence"""

    type: SecurityEventType
    severity: SecuritySeverity
    source: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=2000)
    metadata: Dict[str, Any] = Field(default_factory=dict)


# ============================================================================
# Response DTOs
# ============================================================================


class SecurityEventsResponse(BaseModel):
    """Page of security events, newest first"""

    events: List[SecurityEvent]
    limit: int
    offset: int


class ResolveSecurityEventResponse(BaseModel):
    id: str
    resolved: bool
