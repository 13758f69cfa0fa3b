from fastapi import APIRouter, Depends, Request, status

from src.adapter.services.runtime import SecurityRuntime
from src.api.error import ClientError, ServerError
from src.api.utils.request_context import build_request_context
from src.app.services.dtos import DiagnosticResult
from src.app.use_cases.diagnostics import RunSecurityTestUseCase
from src.depends import get_current_user, get_security_runtime

router = APIRouter(prefix="/security-extended/tests", tags=["Diagnostics"])


@router.get("/{test_id}", status_code=status.HTTP_200_OK, response_model=DiagnosticResult)
async def run_security_test(
    test_id: str,
    request: Request,
    current_user: dict = Depends(get_current_user),
    runtime: SecurityRuntime = Depends(get_security_runtime),
):
    """
    Run Security Test

    test_id: rate-limiting, api-key-validation, risk-scoring, cache,
    backup-codes, security-config or audit-logging.

    Raises:
        - 403 Forbidden: Insufficient role
        - 404 Not Found: Unknown test id
    """
    use_case = RunSecurityTestUseCase(
        runtime.audit, runtime.api_keys, runtime.cache, runtime.config
    )
    result = await use_case.execute(
        test_id, current_user["role"], build_request_context(request, current_user)
    )

    if result.is_err():
        error = result.error
        if error.code == "INSUFFICIENT_ROLE":
            raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
        if error.code == "UNKNOWN_TEST":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)

    return result.value
