"""
Manage IP Blocks Use Cases

Manual block, lookup and unblock of client addresses.
"""

import logging

from libs.result import Error, Result, Return
from src.app.services.dtos import IpBlockStatus
from src.app.services.ip_blocklist import IpBlocklist
from src.app.services.security_audit_service import SecurityAuditService
from src.app.use_cases.common import require_admin_role
from src.domain.entities import RequestContext, SecurityEventType, SecuritySeverity
from .dtos import BlockIpCommand

logger = logging.getLogger(__name__)

EVENT_SOURCE = "IP Blocklist"


class BlockIpUseCase:
    """
    Business Rules:
    - Caller must have role=owner or role=admin
    - Blocking an already blocked IP replaces the block
    - Every manual block is recorded as a security event
    """

    def __init__(self, blocklist: IpBlocklist, audit: SecurityAuditService):
        self.blocklist = blocklist
        self.audit = audit

    async def execute(
        self, role: str, command: BlockIpCommand, context: RequestContext
    ) -> Result[IpBlockStatus]:
        error = require_admin_role(role, "block IP addresses")
        if error:
            return Return.err(error)

        ip = str(command.ip)
        blocked = await self.blocklist.block(ip, command.reason, command.duration_seconds)
        self.audit.log_security_event(
            SecurityEventType.SUSPICIOUS_ACTIVITY,
            SecuritySeverity.medium,
            EVENT_SOURCE,
            f"IP {ip} blocked manually: {command.reason}",
            {"ip": ip, "duration_seconds": command.duration_seconds},
            context,
        )
        return Return.ok(blocked)


class GetIpBlockUseCase:
    def __init__(self, blocklist: IpBlocklist):
        self.blocklist = blocklist

    async def execute(self, role: str, ip: str) -> Result[IpBlockStatus]:
        error = require_admin_role(role, "view IP blocks")
        if error:
            return Return.err(error)
        return Return.ok(await self.blocklist.is_blocked(ip))


class UnblockIpUseCase:
    def __init__(self, blocklist: IpBlocklist):
        self.blocklist = blocklist

    async def execute(self, role: str, ip: str) -> Result[None]:
        error = require_admin_role(role, "unblock IP addresses")
        if error:
            return Return.err(error)

        if not await self.blocklist.unblock(ip):
            return Return.err(Error("IP_NOT_BLOCKED", f"IP {ip} is not blocked"))
        return Return.ok(None)
