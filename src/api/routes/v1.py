"""
Public API Routes (v1)

Authenticated with organization API keys instead of user JWTs.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel

from src.adapter.services.runtime import SecurityRuntime
from src.api.utils.api_key_auth import require_api_key
from src.depends import get_security_runtime
from src.domain.entities import (
    ApiKey,
    ApiKeyPermission,
    SecurityEvent,
    SecurityEventType,
    SecuritySeverity,
)

router = APIRouter(prefix="/v1", tags=["Public API"])


class OrganizationResponse(BaseModel):
    id: str
    api_key_id: str
    api_key_name: str
    permissions: List[ApiKeyPermission]


class PublicSecurityEventsResponse(BaseModel):
    organization_id: str
    events: List[SecurityEvent]


@router.get("/organization", status_code=status.HTTP_200_OK, response_model=OrganizationResponse)
async def get_organization(
    api_key: ApiKey = Depends(require_api_key(ApiKeyPermission.read_organizations)),
):
    """
    Organization owning the API key

    Raises:
        - 401 Unauthorized: Missing, unknown, inactive or expired key
        - 403 Forbidden: Key lacks read:organizations
        - 429 Too Many Requests: Key quota exhausted (see Retry-After)
    """
    return OrganizationResponse(
        id=api_key.organization_id,
        api_key_id=api_key.id,
        api_key_name=api_key.name,
        permissions=api_key.permissions,
    )


@router.get(
    "/security/events",
    status_code=status.HTTP_200_OK,
    response_model=PublicSecurityEventsResponse,
)
async def get_security_events(
    api_key: ApiKey = Depends(require_api_key(ApiKeyPermission.read_security_events)),
    runtime: SecurityRuntime = Depends(get_security_runtime),
    type: Optional[SecurityEventType] = Query(None),
    severity: Optional[SecuritySeverity] = Query(None),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
):
    """Security events of the key's organization, newest first"""
    events = runtime.audit.get_security_events(
        type=type,
        severity=severity,
        organization_id=api_key.organization_id,
        limit=limit,
        offset=offset,
    )
    return PublicSecurityEventsResponse(organization_id=api_key.organization_id, events=events)
