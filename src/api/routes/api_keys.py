"""
API Key API Routes

Management of the tenant's API keys. Only admin and owner roles.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from libs.result import Error
from src.adapter.services.runtime import SecurityRuntime
from src.api.error import ClientError, ServerError
from src.app.services.dtos import UsageStats
from src.app.use_cases.api_keys import (
    ApiKeysResponse,
    CreateApiKeyCommand,
    CreateApiKeyResponse,
    CreateApiKeyUseCase,
    DeleteApiKeyUseCase,
    GetApiKeyUsageUseCase,
    GetApiKeyUseCase,
    ListApiKeysUseCase,
    UpdateApiKeyCommand,
    UpdateApiKeyUseCase,
)
from src.depends import get_current_user, get_security_runtime
from src.domain.entities import ApiKey

router = APIRouter(prefix="/api-keys", tags=["API Keys"])


def raise_for_error(error: Error):
    if error.code == "INSUFFICIENT_ROLE":
        raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
    if error.code == "API_KEY_NOT_FOUND":
        raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
    if error.code in ("INVALID_EXPIRY", "INVALID_PERIOD", "INVALID_UPDATE"):
        raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
    raise ServerError(error)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=CreateApiKeyResponse)
async def create_api_key(
    command: CreateApiKeyCommand,
    current_user: dict = Depends(get_current_user),
    runtime: SecurityRuntime = Depends(get_security_runtime),
):
    """
    Create API Key

    The secret key is returned only in this response.

    Raises:
        - 400 Bad Request: expires_at in the past
        - 403 Forbidden: Insufficient role
    """
    use_case = CreateApiKeyUseCase(runtime.api_keys)
    result = await use_case.execute(current_user["tenant_id"], current_user["role"], command)

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.get("", status_code=status.HTTP_200_OK, response_model=ApiKeysResponse)
async def list_api_keys(
    current_user: dict = Depends(get_current_user),
    runtime: SecurityRuntime = Depends(get_security_runtime),
):
    use_case = ListApiKeysUseCase(runtime.api_keys)
    result = await use_case.execute(current_user["tenant_id"], current_user["role"])

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.get("/{key_id}", status_code=status.HTTP_200_OK, response_model=ApiKey)
async def get_api_key(
    key_id: str,
    current_user: dict = Depends(get_current_user),
    runtime: SecurityRuntime = Depends(get_security_runtime),
):
    use_case = GetApiKeyUseCase(runtime.api_keys)
    result = await use_case.execute(current_user["tenant_id"], current_user["role"], key_id)

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.patch("/{key_id}", status_code=status.HTTP_200_OK, response_model=ApiKey)
async def update_api_key(
    key_id: str,
    command: UpdateApiKeyCommand,
    current_user: dict = Depends(get_current_user),
    runtime: SecurityRuntime = Depends(get_security_runtime),
):
    """Rename, change permissions or rate limit, activate/deactivate"""
    use_case = UpdateApiKeyUseCase(runtime.api_keys)
    result = await use_case.execute(
        current_user["tenant_id"], current_user["role"], key_id, command
    )

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.delete("/{key_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_api_key(
    key_id: str,
    current_user: dict = Depends(get_current_user),
    runtime: SecurityRuntime = Depends(get_security_runtime),
):
    """Delete the key and its usage history"""
    use_case = DeleteApiKeyUseCase(runtime.api_keys)
    result = await use_case.execute(current_user["tenant_id"], current_user["role"], key_id)

    if result.is_err():
        raise_for_error(result.error)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{key_id}/usage", status_code=status.HTTP_200_OK, response_model=UsageStats)
async def get_api_key_usage(
    key_id: str,
    current_user: dict = Depends(get_current_user),
    runtime: SecurityRuntime = Depends(get_security_runtime),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
):
    """Request totals, latency, top endpoints and hourly volume (default: last 24h)"""
    use_case = GetApiKeyUsageUseCase(runtime.api_keys)
    result = await use_case.execute(
        current_user["tenant_id"], current_user["role"], key_id, start_date, end_date
    )

    if result.is_err():
        raise_for_error(result.error)
    return result.value
