"""
Security runtime

Explicitly constructed container for the in-memory security components.
Created once per application, started and stopped by the app lifespan.
"""

import logging
from typing import Optional

from src.adapter.repositories.api_key_repository import InMemoryApiKeyRepository
from src.adapter.repositories.security_event_repository import (
    InMemorySecurityEventRepository,
)
from src.app.services.alerts import IAlertSink, LoggingAlertSink
from src.app.services.api_key_manager import ApiKeyManager
from src.app.services.cache import ICache
from src.app.services.clock import Clock, SystemClock
from src.app.services.field_cipher import FieldCipher
from src.app.services.ip_blocklist import IpBlocklist
from src.app.services.mfa_token_cache import MFATokenCache
from src.app.services.rate_limiter import RateLimiter
from src.app.services.scheduler import IScheduler
from src.app.services.security_audit_service import SecurityAuditService
from src.app.services.sms_sender import ISmsSender, LoggingSmsSender
from src.domain.entities import RateLimit
from .memory_cache import MemoryCache
from .redis_cache import RedisCache
from .scheduler import APSchedulerScheduler

logger = logging.getLogger(__name__)


def build_cache(config, clock: Clock) -> ICache:
    backend = getattr(config, "CACHE_BACKEND", "memory")
    ttl = getattr(config, "CACHE_DEFAULT_TTL", 900)
    if backend == "redis" and getattr(config, "REDIS_URL", None):
        logger.info("Cache backend: redis")
        return RedisCache.from_url(config.REDIS_URL, clock, ttl)
    logger.info("Cache backend: memory")
    return MemoryCache(clock, ttl)


class SecurityRuntime:
    def __init__(
        self,
        config,
        clock: Optional[Clock] = None,
        scheduler: Optional[IScheduler] = None,
        cache: Optional[ICache] = None,
        alert_sink: Optional[IAlertSink] = None,
        sms_sender: Optional[ISmsSender] = None,
    ):
        self.config = config
        self.clock = clock or SystemClock()
        self.scheduler = scheduler or APSchedulerScheduler()
        self.cache = cache or build_cache(config, self.clock)
        self.mfa_tokens = MFATokenCache(self.cache, ttl=config.MFA_SMS_CODE_TTL)
        self.rate_limiter = RateLimiter(self.clock)
        self.ip_blocklist = IpBlocklist(
            self.cache,
            self.clock,
            self.rate_limiter,
            default_block_seconds=config.IP_BLOCK_DEFAULT_SECONDS,
            ddos_threshold=config.DDOS_REQUESTS_PER_MINUTE,
        )
        self.cipher = FieldCipher.from_config(config)
        self.sms_sender = sms_sender or LoggingSmsSender()

        self.audit = SecurityAuditService(
            InMemorySecurityEventRepository(config.SECURITY_EVENT_MAX_EVENTS),
            self.clock,
            alert_sink or LoggingAlertSink(),
            config=config,
            retention_days=config.SECURITY_EVENT_RETENTION_DAYS,
        )
        self.api_keys = ApiKeyManager(
            InMemoryApiKeyRepository(),
            self.clock,
            default_rate_limit=RateLimit(
                requests=config.API_KEY_DEFAULT_RATE_LIMIT,
                window_seconds=config.API_KEY_DEFAULT_RATE_WINDOW_SECONDS,
            ),
            usage_retention_days=config.API_KEY_USAGE_RETENTION_DAYS,
        )

    def start(self) -> None:
        interval = self.config.SECURITY_AUDIT_INTERVAL_SECONDS
        self.audit.schedule(self.scheduler, interval)
        self.api_keys.schedule(self.scheduler, interval)
        self.ip_blocklist.schedule(self.scheduler, self.audit, interval)
        self.scheduler.start()
        logger.info("Security runtime started")

    def shutdown(self) -> None:
        self.audit.stop()
        self.api_keys.stop()
        self.ip_blocklist.stop()
        self.scheduler.shutdown()
        logger.info("Security runtime stopped")
