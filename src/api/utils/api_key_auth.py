"""
API key authentication for the public /v1 surface.

`require_api_key(permission)` builds a dependency that turns away blocked
IPs, validates the key from `Authorization: Bearer <secret>` or
`X-Api-Key`, enforces its quota, and leaves the key on `request.state` so
`record_api_key_usage` can log the call once the response status is known.
"""

import logging
import math
import time
from typing import Optional

from fastapi import Depends, Header, Request, status

from libs.result import Error
from src.adapter.services.runtime import SecurityRuntime
from src.api.error import ClientError
from src.api.utils.request_context import build_request_context, get_client_ip
from src.app.services.api_key_manager import (
    ERROR_API_KEY_REQUIRED,
    ERROR_INSUFFICIENT_PERMISSIONS,
    extract_api_key,
)
from src.depends import get_security_runtime
from src.domain.entities import (
    ApiKey,
    ApiKeyPermission,
    SecurityEventType,
    SecuritySeverity,
)

logger = logging.getLogger(__name__)

EVENT_SOURCE = "API Key Authentication"


def require_api_key(permission: Optional[ApiKeyPermission] = None):
    async def dependency(
        request: Request,
        authorization: Optional[str] = Header(default=None),
        x_api_key: Optional[str] = Header(default=None),
        runtime: SecurityRuntime = Depends(get_security_runtime),
    ) -> ApiKey:
        request.state.api_key_started = time.perf_counter()

        ip_status = await runtime.ip_blocklist.check_request(get_client_ip(request))
        if ip_status.blocked:
            runtime.audit.log_security_event(
                SecurityEventType.UNAUTHORIZED_ACCESS,
                SecuritySeverity.low,
                EVENT_SOURCE,
                f"Request from blocked IP {ip_status.ip}",
                {"reason": ip_status.reason},
                build_request_context(request),
            )
            raise ClientError(
                Error("IP_BLOCKED", "Access from this IP address is temporarily blocked"),
                status_code=status.HTTP_403_FORBIDDEN,
            )

        secret_key = extract_api_key(authorization, x_api_key)

        result = runtime.api_keys.authenticate(secret_key, permission)

        if result.rate_limit_exceeded:
            api_key = result.api_key
            context = build_request_context(request)
            context.organization_id = api_key.organization_id
            runtime.audit.log_security_event(
                SecurityEventType.RATE_LIMIT_EXCEEDED,
                SecuritySeverity.medium,
                EVENT_SOURCE,
                f"API key {api_key.id} exceeded its rate limit",
                {
                    "api_key_id": api_key.id,
                    "limit": api_key.rate_limit.requests,
                    "window_seconds": api_key.rate_limit.window_seconds,
                },
                context,
            )
            quota = result.quota
            retry_at = quota.retry_at or quota.reset_time
            retry_after = max(
                1, math.ceil((retry_at - runtime.clock.now()).total_seconds())
            )
            raise ClientError(
                Error("RATE_LIMIT_EXCEEDED", result.error),
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                headers={"Retry-After": str(retry_after)},
            )

        if not result.valid:
            if result.error == ERROR_INSUFFICIENT_PERMISSIONS:
                status_code = status.HTTP_403_FORBIDDEN
                code = "INSUFFICIENT_PERMISSIONS"
            else:
                status_code = status.HTTP_401_UNAUTHORIZED
                code = "API_KEY_REQUIRED" if result.error == ERROR_API_KEY_REQUIRED else "INVALID_API_KEY"

            runtime.audit.log_security_event(
                SecurityEventType.UNAUTHORIZED_ACCESS,
                SecuritySeverity.medium,
                EVENT_SOURCE,
                f"API key rejected: {result.error}",
                {"reason": result.error, "required_permission": permission.value if permission else None},
                build_request_context(request),
            )
            raise ClientError(Error(code, result.error), status_code=status_code)

        # Rejected calls are not metered
        request.state.api_key = result.api_key
        request.state.api_key_quota = result.quota
        return result.api_key

    return dependency


async def record_api_key_usage(request: Request, call_next):
    """HTTP middleware: append a usage record for API-key-authenticated calls"""
    response = await call_next(request)

    api_key = getattr(request.state, "api_key", None)
    if api_key is None:
        return response

    runtime: SecurityRuntime = request.app.state.security
    started = getattr(request.state, "api_key_started", time.perf_counter())
    runtime.api_keys.record_usage(
        api_key,
        endpoint=request.url.path,
        method=request.method,
        response_status=response.status_code,
        response_time=(time.perf_counter() - started) * 1000,
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )

    quota = getattr(request.state, "api_key_quota", None)
    if quota is not None:
        response.headers["X-RateLimit-Limit"] = str(api_key.rate_limit.requests)
        response.headers["X-RateLimit-Remaining"] = str(max(0, quota.remaining - 1))
        response.headers["X-RateLimit-Reset"] = str(int(quota.reset_time.timestamp()))
    return response
