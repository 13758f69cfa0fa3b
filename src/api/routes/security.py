"""
Security API Routes

Security event log, statistics, audit reports and pattern analysis for
the caller's tenant, plus the IP block list.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status

from libs.result import Error
from src.adapter.services.runtime import SecurityRuntime
from src.api.error import ClientError, ServerError
from src.api.utils.request_context import build_request_context
from src.app.services.dtos import (
    IpBlockStatus,
    SecurityAuditReport,
    SecurityStats,
    SuspiciousPatterns,
)
from src.app.use_cases.security import (
    AnalyzeSecurityPatternsUseCase,
    BlockIpCommand,
    BlockIpUseCase,
    GenerateAuditReportUseCase,
    GetIpBlockUseCase,
    GetSecurityEventsUseCase,
    GetSecurityStatsUseCase,
    LogSecurityEventCommand,
    LogSecurityEventUseCase,
    ResolveSecurityEventResponse,
    ResolveSecurityEventUseCase,
    SecurityEventQuery,
    SecurityEventsResponse,
    UnblockIpUseCase,
)
from src.depends import get_current_user, get_security_runtime
from src.domain.entities import SecurityEvent, SecurityEventType, SecuritySeverity

router = APIRouter(prefix="/security", tags=["Security"])


def raise_for_error(error: Error):
    if error.code == "INSUFFICIENT_ROLE":
        raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
    if error.code in ("EVENT_NOT_FOUND", "IP_NOT_BLOCKED"):
        raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
    if error.code == "INVALID_PERIOD":
        raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
    raise ServerError(error)


@router.get("/events", status_code=status.HTTP_200_OK, response_model=SecurityEventsResponse)
async def get_security_events(
    current_user: dict = Depends(get_current_user),
    runtime: SecurityRuntime = Depends(get_security_runtime),
    type: Optional[SecurityEventType] = Query(None),
    severity: Optional[SecuritySeverity] = Query(None),
    resolved: Optional[bool] = Query(None),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    user_id: Optional[str] = Query(None),
    ip_address: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
):
    """
    List Security Events

    Newest first, filtered and paginated. Only admin and owner roles.

    Raises:
        - 401 Unauthorized: Invalid or expired JWT
        - 403 Forbidden: Insufficient role
    """
    query = SecurityEventQuery(
        type=type,
        severity=severity,
        resolved=resolved,
        start_date=start_date,
        end_date=end_date,
        user_id=user_id,
        ip_address=ip_address,
        limit=limit,
        offset=offset,
    )

    use_case = GetSecurityEventsUseCase(runtime.audit)
    result = await use_case.execute(current_user["tenant_id"], current_user["role"], query)

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.post("/events", status_code=status.HTTP_201_CREATED, response_model=SecurityEvent)
async def log_security_event(
    command: LogSecurityEventCommand,
    request: Request,
    current_user: dict = Depends(get_current_user),
    runtime: SecurityRuntime = Depends(get_security_runtime),
):
    """
    Report Security Event

    Records an event attributed to the caller's user, tenant and address.
    """
    context = build_request_context(request, current_user)

    use_case = LogSecurityEventUseCase(runtime.audit)
    result = await use_case.execute(command, context)

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.post(
    "/events/{event_id}/resolve",
    status_code=status.HTTP_200_OK,
    response_model=ResolveSecurityEventResponse,
)
async def resolve_security_event(
    event_id: str,
    current_user: dict = Depends(get_current_user),
    runtime: SecurityRuntime = Depends(get_security_runtime),
):
    """
    Resolve Security Event

    Raises:
        - 403 Forbidden: Insufficient role
        - 404 Not Found: Unknown event or another tenant's event
    """
    use_case = ResolveSecurityEventUseCase(runtime.audit)
    result = await use_case.execute(current_user["tenant_id"], current_user["role"], event_id)

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.get("/stats", status_code=status.HTTP_200_OK, response_model=SecurityStats)
async def get_security_stats(
    current_user: dict = Depends(get_current_user),
    runtime: SecurityRuntime = Depends(get_security_runtime),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
):
    """Event counts by type and severity, top IPs and endpoints (default: last 24h)"""
    use_case = GetSecurityStatsUseCase(runtime.audit)
    result = await use_case.execute(current_user["role"], start_date, end_date)

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.get("/audit-report", status_code=status.HTTP_200_OK, response_model=SecurityAuditReport)
async def get_audit_report(
    current_user: dict = Depends(get_current_user),
    runtime: SecurityRuntime = Depends(get_security_runtime),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
):
    """
    Generate Security Audit Report

    Period defaults to the last 7 days.

    Raises:
        - 400 Bad Request: start_date not before end_date
        - 403 Forbidden: Insufficient role
    """
    use_case = GenerateAuditReportUseCase(runtime.audit)
    result = await use_case.execute(current_user["role"], start_date, end_date)

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.get("/patterns", status_code=status.HTTP_200_OK, response_model=SuspiciousPatterns)
async def get_suspicious_patterns(
    current_user: dict = Depends(get_current_user),
    runtime: SecurityRuntime = Depends(get_security_runtime),
):
    """Suspicious IPs and users (risk > 50) and hourly activity spikes over the last 24h"""
    use_case = AnalyzeSecurityPatternsUseCase(runtime.audit)
    result = await use_case.execute(current_user["role"])

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.post("/blocked-ips", status_code=status.HTTP_201_CREATED, response_model=IpBlockStatus)
async def block_ip(
    command: BlockIpCommand,
    request: Request,
    current_user: dict = Depends(get_current_user),
    runtime: SecurityRuntime = Depends(get_security_runtime),
):
    """
    Block IP Address

    Requests from the address to the /v1 API are refused with 403 until
    the block expires or is lifted.
    """
    use_case = BlockIpUseCase(runtime.ip_blocklist, runtime.audit)
    result = await use_case.execute(
        current_user["role"], command, build_request_context(request, current_user)
    )

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.get("/blocked-ips/{ip}", status_code=status.HTTP_200_OK, response_model=IpBlockStatus)
async def get_ip_block(
    ip: str,
    current_user: dict = Depends(get_current_user),
    runtime: SecurityRuntime = Depends(get_security_runtime),
):
    use_case = GetIpBlockUseCase(runtime.ip_blocklist)
    result = await use_case.execute(current_user["role"], ip)

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.delete("/blocked-ips/{ip}", status_code=status.HTTP_204_NO_CONTENT)
async def unblock_ip(
    ip: str,
    current_user: dict = Depends(get_current_user),
    runtime: SecurityRuntime = Depends(get_security_runtime),
):
    """
    Unblock IP Address

    Raises:
        - 404 Not Found: The address is not blocked
    """
    use_case = UnblockIpUseCase(runtime.ip_blocklist)
    result = await use_case.execute(current_user["role"], ip)

    if result.is_err():
        raise_for_error(result.error)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
