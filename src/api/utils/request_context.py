from typing import Optional

from fastapi import Request

from src.domain.entities import RequestContext

# Checked in order; the first one present wins
CLIENT_IP_HEADERS = ("x-forwarded-for", "x-real-ip", "cf-connecting-ip")


def get_client_ip(request: Request) -> str:
    """
    Best-effort client address.

    Proxy headers are trusted as-is; for X-Forwarded-For the left-most
    (originating) address is used.
    """
    for header in CLIENT_IP_HEADERS:
        value = request.headers.get(header)
        if value:
            return value.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def build_request_context(request: Request, current_user: Optional[dict] = None) -> RequestContext:
    current_user = current_user or {}
    return RequestContext(
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent"),
        user_id=current_user.get("user_id"),
        organization_id=current_user.get("tenant_id"),
        endpoint=request.url.path,
        method=request.method,
    )
