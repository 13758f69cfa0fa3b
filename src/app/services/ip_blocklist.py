"""
IP block list

Blocks live in the shared cache under ip_block:<ip> and lapse with the
entry's TTL. The DDoS check counts every request per IP in a one minute
window and blocks the address once it passes the threshold.
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional

from .cache import ICache
from .clock import Clock
from .dtos import IpBlockStatus, SuspiciousIdentifier
from .rate_limiter import RateLimiter
from .scheduler import IScheduler, PeriodicTask

logger = logging.getLogger(__name__)

DEFAULT_BLOCK_SECONDS = 3600
DDOS_WINDOW_SECONDS = 60
DDOS_THRESHOLD = 100
AUTO_BLOCK_RISK_THRESHOLD = 80

DDOS_REASON = "DDoS protection triggered - too many requests"


class IpBlocklist:
    """
    Business Rules:
    - A block records reason, blocked_at and duration; it expires after
      duration seconds
    - More than DDOS_THRESHOLD requests from one IP inside a minute blocks
      it for an hour
    - IPs whose 24h risk score exceeds 80 are blocked by the periodic job
    """

    def __init__(
        self,
        cache: ICache,
        clock: Clock,
        rate_limiter: Optional[RateLimiter] = None,
        default_block_seconds: int = DEFAULT_BLOCK_SECONDS,
        ddos_threshold: int = DDOS_THRESHOLD,
    ):
        self.cache = cache
        self.clock = clock
        self.rate_limiter = rate_limiter or RateLimiter(clock)
        self.default_block_seconds = default_block_seconds
        self.ddos_threshold = ddos_threshold
        self._tasks: List[PeriodicTask] = []

    @staticmethod
    def _key(ip: str) -> str:
        return f"ip_block:{ip}"

    async def block(
        self, ip: str, reason: str, duration_seconds: Optional[int] = None
    ) -> IpBlockStatus:
        duration = duration_seconds or self.default_block_seconds
        now = self.clock.now()
        await self.cache.set(
            self._key(ip),
            {"reason": reason, "blocked_at": now.isoformat(), "duration": duration},
            duration,
        )
        logger.warning(f"IP {ip} blocked for {duration}s: {reason}")
        return IpBlockStatus(
            ip=ip,
            blocked=True,
            reason=reason,
            blocked_at=now,
            expires_at=now + timedelta(seconds=duration),
        )

    async def is_blocked(self, ip: str) -> IpBlockStatus:
        data = await self.cache.get(self._key(ip))
        if not data:
            return IpBlockStatus(ip=ip, blocked=False)

        blocked_at = datetime.fromisoformat(data["blocked_at"])
        return IpBlockStatus(
            ip=ip,
            blocked=True,
            reason=data.get("reason"),
            blocked_at=blocked_at,
            expires_at=blocked_at + timedelta(seconds=data["duration"]),
        )

    async def unblock(self, ip: str) -> bool:
        """False when the IP was not blocked"""
        status = await self.is_blocked(ip)
        await self.cache.delete(self._key(ip))
        if status.blocked:
            logger.info(f"IP {ip} unblocked")
        return status.blocked

    async def check_request(self, ip: str) -> IpBlockStatus:
        """Block status for a request from `ip`, counting it toward the DDoS window"""
        status = await self.is_blocked(ip)
        if status.blocked:
            return status

        hits = self.rate_limiter.check(f"ddos:{ip}", self.ddos_threshold, DDOS_WINDOW_SECONDS)
        if not hits.allowed:
            self.rate_limiter.reset(f"ddos:{ip}")
            return await self.block(ip, DDOS_REASON, DEFAULT_BLOCK_SECONDS)
        return status

    async def block_high_risk(self, suspicious_ips: List[SuspiciousIdentifier]) -> List[str]:
        blocked = []
        for ip in suspicious_ips:
            if ip.risk_score <= AUTO_BLOCK_RISK_THRESHOLD:
                continue
            if (await self.is_blocked(ip.identifier)).blocked:
                continue
            await self.block(
                ip.identifier, f"Automated analysis: risk score {ip.risk_score}"
            )
            blocked.append(ip.identifier)
        return blocked

    def schedule(self, scheduler: IScheduler, audit, interval_seconds: int = 3600) -> None:
        async def block_suspicious_ips():
            try:
                patterns = audit.analyze_suspicious_patterns()
                return await self.block_high_risk(patterns.suspicious_ips)
            except Exception as e:
                logger.error(f"Error in suspicious IP blocking: {e}")
                return []

        self._tasks.append(
            scheduler.every("suspicious-ip-blocking", interval_seconds, block_suspicious_ips)
        )

    def stop(self) -> None:
        for task in self._tasks:
            task.cancel()
        self._tasks.clear()
