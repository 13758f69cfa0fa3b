"""
Security Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class SecurityEventType(str, Enum):
    """Category of a security-relevant occurrence"""

    UNAUTHORIZED_ACCESS = "UNAUTHORIZED_ACCESS"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    MALICIOUS_REQUEST = "MALICIOUS_REQUEST"
    BRUTE_FORCE_ATTEMPT = "BRUTE_FORCE_ATTEMPT"
    SUSPICIOUS_ACTIVITY = "SUSPICIOUS_ACTIVITY"
    DATA_BREACH_ATTEMPT = "DATA_BREACH_ATTEMPT"
    PRIVILEGE_ESCALATION = "PRIVILEGE_ESCALATION"
    API_ABUSE = "API_ABUSE"
    INVALID_REQUEST = "INVALID_REQUEST"
    SECURITY_TEST_EXECUTED = "SECURITY_TEST_EXECUTED"


class SecuritySeverity(str, Enum):
    """Event severity, ordered low < medium < high < critical"""

    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    # str would otherwise compare by spelling
    def __lt__(self, other):
        if not isinstance(other, SecuritySeverity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, SecuritySeverity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, SecuritySeverity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, SecuritySeverity):
            return NotImplemented
        return self.rank >= other.rank


_SEVERITY_RANK = {
    SecuritySeverity.low: 0,
    SecuritySeverity.medium: 1,
    SecuritySeverity.high: 2,
    SecuritySeverity.critical: 3,
}


class ApiKeyPermission(str, Enum):
    """Capabilities that can be granted to an API key"""

    read_organizations = "read:organizations"
    write_organizations = "write:organizations"
    read_users = "read:users"
    write_users = "write:users"
    read_security_events = "read:security_events"
    webhook_access = "webhook:access"
    admin_access = "admin:access"


class MfaDeviceType(str, Enum):
    """Second-factor device kind"""

    totp = "totp"
    sms = "sms"


class MfaCodeType(str, Enum):
    """Kind of code presented at verification time"""

    totp = "totp"
    sms = "sms"
    backup_code = "backup_code"


class EncryptionKeyStatus(str, Enum):
    """Encryption key status"""

    active = "active"
    disabled = "disabled"


class MembershipRole(str, Enum):
    """Caller role carried in the JWT"""

    owner = "owner"
    admin = "admin"
    member = "member"
    viewer = "viewer"
