import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file)
else:
    data = dict()

DEFAULT_JWT_SECRET = "dev-secret-key-change-in-production"


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./security.db")
    REDIS_URL = data.get("REDIS_URL", "redis://localhost:6379/0")
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    ENVIRONMENT = data.get("ENVIRONMENT", "dev")
    PUBLIC_URL = data.get("PUBLIC_URL", "http://localhost:8000")
    CACHE_BACKEND = data.get("CACHE_BACKEND", "memory")
    CACHE_DEFAULT_TTL = int(data.get("CACHE_DEFAULT_TTL", 900))
    JWT_SECRET = data.get("JWT_SECRET", DEFAULT_JWT_SECRET)
    ENCRYPTION_MASTER_KEY = data.get("ENCRYPTION_MASTER_KEY", "")

    # Security event store
    SECURITY_EVENT_RETENTION_DAYS = int(data.get("SECURITY_EVENT_RETENTION_DAYS", 30))
    SECURITY_EVENT_MAX_EVENTS = int(data.get("SECURITY_EVENT_MAX_EVENTS", 10000))
    SECURITY_AUDIT_INTERVAL_SECONDS = int(data.get("SECURITY_AUDIT_INTERVAL_SECONDS", 3600))

    # API keys
    API_KEY_USAGE_RETENTION_DAYS = int(data.get("API_KEY_USAGE_RETENTION_DAYS", 30))
    API_KEY_DEFAULT_RATE_LIMIT = int(data.get("API_KEY_DEFAULT_RATE_LIMIT", 1000))
    API_KEY_DEFAULT_RATE_WINDOW_SECONDS = int(
        data.get("API_KEY_DEFAULT_RATE_WINDOW_SECONDS", 3600)
    )

    # IP blocking
    IP_BLOCK_DEFAULT_SECONDS = int(data.get("IP_BLOCK_DEFAULT_SECONDS", 3600))
    DDOS_REQUESTS_PER_MINUTE = int(data.get("DDOS_REQUESTS_PER_MINUTE", 100))

    # MFA
    MFA_SMS_CODE_TTL = int(data.get("MFA_SMS_CODE_TTL", 300))
    MFA_MAX_ATTEMPTS = int(data.get("MFA_MAX_ATTEMPTS", 5))
    MFA_ATTEMPT_WINDOW_SECONDS = int(data.get("MFA_ATTEMPT_WINDOW_SECONDS", 900))
