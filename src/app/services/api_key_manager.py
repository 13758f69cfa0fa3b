"""
API Key Manager

Issues, validates and meters organization API keys. Usage is kept in an
in-process log that drives quota checks and usage statistics.
"""

import bisect
import hashlib
import hmac
import logging
import secrets
import string
from collections import Counter
from datetime import datetime, timedelta
from typing import List, Optional

from src.app.repositories.api_key_repository import IApiKeyRepository
from src.domain.entities import ApiKey, ApiKeyPermission, ApiKeyUsage, RateLimit
from src.domain.entities.api_key import generate_key_id
from .clock import Clock
from .dtos import (
    ApiKeyValidationResult,
    CountByKey,
    CreatedApiKey,
    RateLimitStatus,
    UsageStats,
)
from .scheduler import IScheduler, PeriodicTask

logger = logging.getLogger(__name__)

SECRET_PREFIX = "sk_"
SECRET_LENGTH = 48
SECRET_ALPHABET = string.ascii_letters + string.digits

ERROR_API_KEY_REQUIRED = "API key required"
ERROR_INVALID_KEY = "Invalid API key"
ERROR_INACTIVE_KEY = "API key is inactive"
ERROR_EXPIRED_KEY = "API key has expired"
ERROR_INSUFFICIENT_PERMISSIONS = "Insufficient permissions"
ERROR_RATE_LIMITED = "Rate limit exceeded"

UPDATABLE_FIELDS = ("name", "permissions", "is_active", "expires_at", "rate_limit")


def hash_secret(secret_key: str) -> str:
    return hashlib.sha256(secret_key.encode("utf-8")).hexdigest()


def generate_secret_key() -> str:
    return SECRET_PREFIX + "".join(
        secrets.choice(SECRET_ALPHABET) for _ in range(SECRET_LENGTH)
    )


def extract_api_key(authorization: Optional[str], x_api_key: Optional[str]) -> Optional[str]:
    """Bearer token from Authorization wins over X-Api-Key"""
    if authorization and authorization.startswith("Bearer "):
        return authorization[len("Bearer "):].strip() or None
    if x_api_key:
        return x_api_key.strip() or None
    return None


class ApiKeyManager:
    """
    API key lifecycle and quota enforcement.

    Business Rules:
    - Secret returned once at creation; only its SHA-256 digest is stored
    - Validation checks existence, active flag, expiry, then permission;
      authenticate() adds the quota check last
    - Quota counts usage records newer than now - window
    - Usage older than the retention window is swept periodically
    """

    def __init__(
        self,
        repository: IApiKeyRepository,
        clock: Clock,
        default_rate_limit: Optional[RateLimit] = None,
        usage_retention_days: int = 30,
    ):
        self.repository = repository
        self.clock = clock
        self.default_rate_limit = default_rate_limit or RateLimit(
            requests=1000, window_seconds=3600
        )
        self.usage_retention_days = usage_retention_days
        self._tasks: List[PeriodicTask] = []

    def create_api_key(
        self,
        name: str,
        organization_id: str,
        permissions: List[ApiKeyPermission],
        expires_at: Optional[datetime] = None,
        rate_limit: Optional[RateLimit] = None,
    ) -> CreatedApiKey:
        now = self.clock.now()
        secret_key = generate_secret_key()

        api_key = ApiKey(
            id=generate_key_id(now),
            name=name,
            organization_id=organization_id,
            key_hash=hash_secret(secret_key),
            permissions=list(permissions),
            is_active=True,
            created_at=now,
            expires_at=expires_at,
            rate_limit=rate_limit or self.default_rate_limit,
        )
        self.repository.create(api_key)
        logger.info(f"API key {api_key.id} created for organization {organization_id}")

        return CreatedApiKey(api_key=api_key, secret_key=secret_key)

    def validate_api_key(
        self,
        secret_key: Optional[str],
        required_permission: Optional[ApiKeyPermission] = None,
    ) -> ApiKeyValidationResult:
        if not secret_key:
            return ApiKeyValidationResult(valid=False, error=ERROR_API_KEY_REQUIRED)

        key_hash = hash_secret(secret_key)
        api_key = self.repository.get_by_hash(key_hash)

        if api_key is None or not hmac.compare_digest(api_key.key_hash, key_hash):
            return ApiKeyValidationResult(valid=False, error=ERROR_INVALID_KEY)

        if not api_key.is_active:
            return ApiKeyValidationResult(valid=False, error=ERROR_INACTIVE_KEY)

        if api_key.expires_at is not None and api_key.expires_at < self.clock.now():
            return ApiKeyValidationResult(valid=False, error=ERROR_EXPIRED_KEY)

        if required_permission is not None and required_permission not in api_key.permissions:
            return ApiKeyValidationResult(valid=False, error=ERROR_INSUFFICIENT_PERMISSIONS)

        return ApiKeyValidationResult(valid=True, api_key=api_key)

    def authenticate(
        self,
        secret_key: Optional[str],
        required_permission: Optional[ApiKeyPermission] = None,
    ) -> ApiKeyValidationResult:
        """Validate the key, then check its quota"""
        validation = self.validate_api_key(secret_key, required_permission)
        if not validation.valid:
            return validation

        quota = self.check_rate_limit(validation.api_key)
        if not quota.allowed:
            return ApiKeyValidationResult(
                valid=False,
                api_key=validation.api_key,
                error=ERROR_RATE_LIMITED,
                rate_limit_exceeded=True,
                quota=quota,
            )
        return ApiKeyValidationResult(valid=True, api_key=validation.api_key, quota=quota)

    def check_rate_limit(self, api_key: ApiKey) -> RateLimitStatus:
        """
        Count usage inside the look-back window.

        reset_time is window_start + window. retry_at is when the oldest
        counted request leaves the window, the earliest instant a blocked
        caller can succeed again.

        Usage lists are append-only in clock order, so the window start is
        located by bisection instead of rescanning the whole log.
        """
        now = self.clock.now()
        window = timedelta(seconds=api_key.rate_limit.window_seconds)
        window_start = now - window

        usage = self.repository.get_usage(api_key.id)
        first_in_window = bisect.bisect_right(
            usage, window_start, key=lambda u: u.timestamp
        )
        request_count = len(usage) - first_in_window
        limit = api_key.rate_limit.requests

        if request_count:
            retry_at = usage[first_in_window].timestamp + window
        else:
            retry_at = now

        return RateLimitStatus(
            allowed=request_count < limit,
            remaining=max(0, limit - request_count),
            reset_time=window_start + window,
            total_hits=request_count,
            retry_at=retry_at,
        )

    def record_usage(
        self,
        api_key: ApiKey,
        endpoint: str,
        method: str,
        response_status: int,
        response_time: float,
        ip_address: str = "unknown",
        user_agent: Optional[str] = None,
    ) -> None:
        now = self.clock.now()
        self.repository.add_usage(
            api_key.id,
            ApiKeyUsage(
                timestamp=now,
                endpoint=endpoint,
                method=method,
                ip_address=ip_address,
                user_agent=user_agent or "unknown",
                response_status=response_status,
                response_time=response_time,
            ),
        )

        stored = self.repository.get_by_id(api_key.id)
        if stored is not None:
            stored.usage_count += 1
            stored.last_used_at = now
            self.repository.update(stored)

    def get_api_keys(self, organization_id: str) -> List[ApiKey]:
        return self.repository.get_by_organization(organization_id)

    def get_api_key(self, key_id: str) -> Optional[ApiKey]:
        return self.repository.get_by_id(key_id)

    def update_api_key(self, key_id: str, **updates) -> Optional[ApiKey]:
        api_key = self.repository.get_by_id(key_id)
        if api_key is None:
            return None

        changes = {k: v for k, v in updates.items() if k in UPDATABLE_FIELDS}
        updated = api_key.model_copy(update=changes)
        return self.repository.update(updated)

    def delete_api_key(self, key_id: str) -> bool:
        deleted = self.repository.delete(key_id)
        if deleted:
            logger.info(f"API key {key_id} deleted")
        return deleted

    def get_usage_stats(self, key_id: str, start: datetime, end: datetime) -> UsageStats:
        usage = [
            u for u in self.repository.get_usage(key_id) if start <= u.timestamp <= end
        ]

        total = len(usage)
        successful = sum(1 for u in usage if u.response_status < 400)
        average = sum(u.response_time for u in usage) / total if total else 0.0

        endpoints = Counter(u.endpoint for u in usage)
        hours = Counter(
            u.timestamp.strftime("%Y-%m-%dT%H:00:00") for u in usage
        )

        return UsageStats(
            total_requests=total,
            successful_requests=successful,
            failed_requests=total - successful,
            average_response_time=average,
            top_endpoints=[CountByKey(key=k, count=c) for k, c in endpoints.most_common(10)],
            requests_by_hour=[CountByKey(key=k, count=c) for k, c in sorted(hours.items())],
        )

    def cleanup_usage_records(self) -> int:
        cutoff = self.clock.now() - timedelta(days=self.usage_retention_days)
        removed = self.repository.delete_usage_older_than(cutoff)
        if removed:
            logger.info(f"API key usage cleanup removed {removed} records")
        return removed

    def schedule(self, scheduler: IScheduler, interval_seconds: int = 3600) -> None:
        self._tasks.append(
            scheduler.every("api-key-usage-cleanup", interval_seconds, self.cleanup_usage_records)
        )

    def stop(self) -> None:
        for task in self._tasks:
            task.cancel()
        self._tasks.clear()
