"""
Security Service Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import (
    ApiKeyPermission,
    EncryptionKeyStatus,
    MembershipRole,
    MfaCodeType,
    MfaDeviceType,
    SecurityEventType,
    SecuritySeverity,
)

# Export all entities
from .security_event import RequestContext, SecurityEvent
from .api_key import API_PERMISSIONS, ApiKey, ApiKeyUsage, RateLimit
from .mfa_device import MfaDevice
from .encryption_key import EncryptionKey

__all__ = [
    # Enums
    "ApiKeyPermission",
    "EncryptionKeyStatus",
    "MembershipRole",
    "MfaCodeType",
    "MfaDeviceType",
    "SecurityEventType",
    "SecuritySeverity",
    # Entities
    "RequestContext",
    "SecurityEvent",
    "ApiKey",
    "ApiKeyUsage",
    "RateLimit",
    "API_PERMISSIONS",
    "MfaDevice",
    "EncryptionKey",
]
