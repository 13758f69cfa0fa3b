"""
Run Security Test Use Case

On-demand self checks of the security components. Each check exercises
the live component (or a scratch instance of it) and reports what it saw.
"""

import logging
from typing import Awaitable, Callable, Dict

from libs.result import Error, Result, Return
from src.app.services.api_key_manager import (
    ERROR_API_KEY_REQUIRED,
    ERROR_INVALID_KEY,
    ApiKeyManager,
    generate_secret_key,
)
from src.app.services.audit_report import detect_vulnerabilities
from src.app.services.backup_codes import (
    BACKUP_CODE_COUNT,
    BACKUP_CODE_DIGITS,
    generate_backup_codes,
    hash_backup_code,
    match_backup_code,
)
from src.app.services.cache import ICache
from src.app.services.dtos import DiagnosticResult
from src.app.services.rate_limiter import RateLimiter
from src.app.services.risk_scorer import calculate_risk_score
from src.app.services.security_audit_service import SecurityAuditService
from src.app.use_cases.common import require_admin_role
from src.domain.entities import (
    RequestContext,
    SecurityEvent,
    SecurityEventType,
    SecuritySeverity,
)
from src.domain.entities.security_event import generate_event_id

logger = logging.getLogger(__name__)

DIAGNOSTIC_RATE_LIMIT = 5
DIAGNOSTIC_RATE_WINDOW = 60


class RunSecurityTestUseCase:
    """
    Business Rules:
    - Caller must have role=owner or role=admin
    - Unknown test ids are rejected with UNKNOWN_TEST
    - Every run logs SECURITY_TEST_EXECUTED (low) before the check
    - A failing check is a successful run with success=false
    """

    def __init__(
        self,
        audit: SecurityAuditService,
        api_keys: ApiKeyManager,
        cache: ICache,
        config,
    ):
        self.audit = audit
        self.api_keys = api_keys
        self.cache = cache
        self.config = config
        self.tests: Dict[str, Callable[[SecurityEvent], Awaitable[DiagnosticResult]]] = {
            "rate-limiting": self._rate_limiting,
            "api-key-validation": self._api_key_validation,
            "risk-scoring": self._risk_scoring,
            "cache": self._cache,
            "backup-codes": self._backup_codes,
            "security-config": self._security_config,
            "audit-logging": self._audit_logging,
        }

    async def execute(
        self, test_id: str, role: str, context: RequestContext
    ) -> Result[DiagnosticResult]:
        error = require_admin_role(role, "run security tests")
        if error:
            return Return.err(error)

        test = self.tests.get(test_id)
        if test is None:
            return Return.err(
                Error(
                    "UNKNOWN_TEST",
                    f"Unknown security test: {test_id}. "
                    f"Available: {', '.join(sorted(self.tests))}",
                )
            )

        run_event = self.audit.log_security_event(
            SecurityEventType.SECURITY_TEST_EXECUTED,
            SecuritySeverity.low,
            "Security Diagnostics",
            f"Security test executed: {test_id}",
            {"test_id": test_id},
            context,
        )

        result = await test(run_event)
        logger.info(f"Security test {test_id}: {'passed' if result.success else 'failed'}")
        return Return.ok(result)

    async def _rate_limiting(self, _: SecurityEvent) -> DiagnosticResult:
        limiter = RateLimiter(self.audit.clock)
        decisions = [
            limiter.check("diagnostic", DIAGNOSTIC_RATE_LIMIT, DIAGNOSTIC_RATE_WINDOW).allowed
            for _ in range(DIAGNOSTIC_RATE_LIMIT + 1)
        ]
        success = all(decisions[:-1]) and not decisions[-1]

        return DiagnosticResult(
            success=success,
            message=(
                "Rate limiter blocks requests over the limit"
                if success
                else "Rate limiter did not enforce the limit"
            ),
            details={
                "limit": DIAGNOSTIC_RATE_LIMIT,
                "window_seconds": DIAGNOSTIC_RATE_WINDOW,
                "attempts": len(decisions),
                "allowed": sum(decisions),
            },
            recommendations=[] if success else ["Check the rate limiter window arithmetic"],
        )

    async def _api_key_validation(self, _: SecurityEvent) -> DiagnosticResult:
        missing = self.api_keys.validate_api_key(None)
        unknown = self.api_keys.validate_api_key(generate_secret_key())
        malformed = self.api_keys.validate_api_key("not-a-key")

        checks = {
            "missing_key_rejected": not missing.valid and missing.error == ERROR_API_KEY_REQUIRED,
            "unknown_key_rejected": not unknown.valid and unknown.error == ERROR_INVALID_KEY,
            "malformed_key_rejected": not malformed.valid and malformed.error == ERROR_INVALID_KEY,
        }
        success = all(checks.values())

        return DiagnosticResult(
            success=success,
            message=(
                "API key validation rejects invalid keys"
                if success
                else "API key validation accepted an invalid key"
            ),
            details=checks,
            recommendations=[] if success else ["Review API key hashing and lookup"],
        )

    async def _risk_scoring(self, _: SecurityEvent) -> DiagnosticResult:
        now = self.audit.clock.now()

        def sample(type: SecurityEventType, severity: SecuritySeverity) -> SecurityEvent:
            return SecurityEvent(
                id=generate_event_id(now),
                type=type,
                severity=severity,
                source="Security Diagnostics",
                description="diagnostic sample",
                timestamp=now,
            )

        hostile = calculate_risk_score(
            "diagnostic-hostile",
            [sample(SecurityEventType.BRUTE_FORCE_ATTEMPT, SecuritySeverity.critical)] * 3,
        )
        benign = calculate_risk_score(
            "diagnostic-benign",
            [sample(SecurityEventType.INVALID_REQUEST, SecuritySeverity.low)],
        )
        success = hostile >= 80 and benign < 50 and 0 <= benign <= hostile <= 100

        return DiagnosticResult(
            success=success,
            message=(
                "Risk scoring separates hostile from benign activity"
                if success
                else "Risk scoring produced unexpected scores"
            ),
            details={"hostile_score": hostile, "benign_score": benign},
            recommendations=[] if success else ["Review severity and type weights"],
        )

    async def _cache(self, run_event: SecurityEvent) -> DiagnosticResult:
        key = f"diagnostic:cache:{run_event.id}"
        payload = {"run": run_event.id}

        await self.cache.set(key, payload, 60)
        read_back = await self.cache.get(key)
        await self.cache.delete(key)
        after_delete = await self.cache.get(key)

        success = read_back == payload and after_delete is None
        details = {"read_back": read_back == payload, "deleted": after_delete is None}
        details.update(self.cache.stats())

        recommendations = []
        if details.get("backend") == "redis" and not details.get("remote_connected"):
            recommendations.append("Redis is unreachable; cache is running from memory")
        if not success:
            recommendations.append("Check cache backend connectivity")

        return DiagnosticResult(
            success=success,
            message="Cache set/get/delete round trip succeeded" if success else "Cache round trip failed",
            details=details,
            recommendations=recommendations,
        )

    async def _backup_codes(self, _: SecurityEvent) -> DiagnosticResult:
        codes = generate_backup_codes()
        hashes = [hash_backup_code(c) for c in codes]

        checks = {
            "count": len(codes) == BACKUP_CODE_COUNT,
            "unique": len(set(codes)) == len(codes),
            "format": all(c.isdigit() and len(c) == BACKUP_CODE_DIGITS for c in codes),
            "hash_matches": match_backup_code(codes[0], hashes) == hashes[0],
        }
        success = all(checks.values())

        return DiagnosticResult(
            success=success,
            message=(
                "Backup codes are unique and verifiable"
                if success
                else "Backup code generation is broken"
            ),
            details=checks,
        )

    async def _security_config(self, _: SecurityEvent) -> DiagnosticResult:
        vulnerabilities = detect_vulnerabilities(self.config, self.audit.clock.now())
        success = not vulnerabilities

        return DiagnosticResult(
            success=success,
            message=(
                "No configuration vulnerabilities found"
                if success
                else f"{len(vulnerabilities)} configuration vulnerabilities found"
            ),
            details={"vulnerabilities": [v.model_dump(mode="json") for v in vulnerabilities]},
            recommendations=[v.fix_description for v in vulnerabilities if v.fix_description],
        )

    async def _audit_logging(self, run_event: SecurityEvent) -> DiagnosticResult:
        latest = self.audit.get_security_events(
            type=SecurityEventType.SECURITY_TEST_EXECUTED, limit=50
        )
        success = any(e.id == run_event.id for e in latest)

        return DiagnosticResult(
            success=success,
            message=(
                "Security events are recorded and queryable"
                if success
                else "The event logged for this run was not found"
            ),
            details={"event_id": run_event.id, "stored_events": self.audit.repository.count()},
            recommendations=[] if success else ["Check the security event store capacity"],
        )
