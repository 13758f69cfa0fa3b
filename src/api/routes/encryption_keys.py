"""
Encryption Key API Routes

Tenant data keys. Only admin and owner roles.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from libs.result import Error
from src.adapter.services.runtime import SecurityRuntime
from src.api.error import ClientError, ServerError
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.encryption_keys import (
    CreateEncryptionKeyCommand,
    CreateEncryptionKeyUseCase,
    DeleteEncryptionKeyUseCase,
    EncryptionKeyResponse,
    EncryptionKeysResponse,
    ListEncryptionKeysUseCase,
    UpdateEncryptionKeyCommand,
    UpdateEncryptionKeyUseCase,
)
from src.depends import get_current_user, get_security_runtime, get_unit_of_work

router = APIRouter(prefix="/security-extended/encryption-keys", tags=["Encryption Keys"])


def raise_for_error(error: Error):
    if error.code == "INSUFFICIENT_ROLE":
        raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
    if error.code == "KEY_NOT_FOUND":
        raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
    if error.code in ("FORCE_REQUIRED", "NOTHING_TO_UPDATE", "KEY_DISABLED"):
        raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
    raise ServerError(error)


@router.get("", status_code=status.HTTP_200_OK, response_model=EncryptionKeysResponse)
async def list_keys(
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    use_case = ListEncryptionKeysUseCase(uow)
    result = await use_case.execute(UUID(current_user["tenant_id"]), current_user["role"])

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.post("", status_code=status.HTTP_201_CREATED, response_model=EncryptionKeyResponse)
async def create_key(
    command: CreateEncryptionKeyCommand,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    runtime: SecurityRuntime = Depends(get_security_runtime),
):
    use_case = CreateEncryptionKeyUseCase(uow, runtime.cipher)
    result = await use_case.execute(
        UUID(current_user["tenant_id"]), current_user["role"], command
    )

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.put("/{key_id}", status_code=status.HTTP_200_OK, response_model=EncryptionKeyResponse)
async def update_key(
    key_id: UUID,
    command: UpdateEncryptionKeyCommand,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    runtime: SecurityRuntime = Depends(get_security_runtime),
):
    """
    Update Encryption Key

    action: rotate | disable | enable; name renames the key.

    Raises:
        - 400 Bad Request: Nothing to update, or rotating a disabled key
        - 404 Not Found: Unknown key
    """
    use_case = UpdateEncryptionKeyUseCase(uow, runtime.cipher, runtime.clock)
    result = await use_case.execute(
        UUID(current_user["tenant_id"]), current_user["role"], key_id, command
    )

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.delete("/{key_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_key(
    key_id: UUID,
    force: bool = Query(False),
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Delete Encryption Key

    Data encrypted with the key becomes unreadable.

    Raises:
        - 400 Bad Request: force=true not given
        - 404 Not Found: Unknown key
    """
    use_case = DeleteEncryptionKeyUseCase(uow)
    result = await use_case.execute(
        UUID(current_user["tenant_id"]), current_user["role"], key_id, force
    )

    if result.is_err():
        raise_for_error(result.error)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
