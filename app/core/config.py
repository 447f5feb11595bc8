import os

# Database configuration
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./femella_events.db")

# Redis configuration
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

# Per-event registration lock
EVENT_LOCK_TIMEOUT_SECONDS = int(os.getenv("EVENT_LOCK_TIMEOUT_SECONDS", "10"))
EVENT_LOCK_BLOCKING_TIMEOUT_SECONDS = int(os.getenv("EVENT_LOCK_BLOCKING_TIMEOUT_SECONDS", "5"))

# Used when an event's hub cannot be resolved
DEFAULT_DEREGISTRATION_DEADLINE_HOURS = int(os.getenv("DEFAULT_DEREGISTRATION_DEADLINE_HOURS", "24"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]


def get_database_url():
    return DATABASE_URL


def get_redis_url():
    return REDIS_URL
