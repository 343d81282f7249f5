"""Application configuration settings"""

import os
from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes", "on"}


class Config:
    TESTING = _flag("TESTING", "false")
    DEBUG = _flag("DEBUG", "false")

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_PATH = os.getenv("LOG_PATH") or None
    LOG_FORMAT = os.getenv(
        "LOG_FORMAT",
        "%(asctime)s %(levelname)s [%(correlation_id)s] %(name)s: %(message)s",
    )

    # Storage backend: "prisma" (PostgreSQL + Redis) or "memory"
    STORE_BACKEND = os.getenv("STORE_BACKEND", "prisma").lower()

    # Postgresql Database settings
    DATABASE_URL: str = os.getenv("DATABASE_URL", "")

    # Redis settings (change notifications)
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    CHANGE_FEED_PREFIX: str = os.getenv("CHANGE_FEED_PREFIX", "friendchat")
    # Backoff (seconds) before a lost pub/sub listener retries, doubling up to the max
    CHANGE_FEED_RETRY_DELAY: float = float(os.getenv("CHANGE_FEED_RETRY_DELAY", "0.5"))
    CHANGE_FEED_MAX_RETRY_DELAY: float = float(os.getenv("CHANGE_FEED_MAX_RETRY_DELAY", "30"))

    # Conversation view
    # Upper bound on concurrent per-conversation lookups while building a view
    VIEW_FETCH_CONCURRENCY: int = int(os.getenv("VIEW_FETCH_CONCURRENCY", "8"))

    # Messaging
    MESSAGE_PAGE_LIMIT: int = int(os.getenv("MESSAGE_PAGE_LIMIT", "200"))
    MESSAGE_MAX_LENGTH: int = int(os.getenv("MESSAGE_MAX_LENGTH", "4000"))

    # Account search
    SEARCH_LIMIT: int = int(os.getenv("SEARCH_LIMIT", "50"))

    # Auth
    SERVICE_AUTH_SECRET = os.getenv("SERVICE_AUTH_SECRET", "")
    SERVICE_AUTH_ISSUER = os.getenv("SERVICE_AUTH_ISSUER", "your_service_name")
    SERVICE_AUTH_AUDIENCE = os.getenv("SERVICE_AUTH_AUDIENCE", "your_service_audience")


class DevelopmentConfig(Config):
    """Development configuration"""

    DEBUG = True


class TestingConfig(Config):
    """Testing configuration"""

    TESTING = True
    STORE_BACKEND = "memory"


class ProductionConfig(Config):
    """Production configuration"""

    pass


# Configuration dictionary
config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}


def get_config(env=None):
    """Get configuration based on environment"""
    if env is None:
        env = os.getenv("APP_ENV", "development")
    return config.get(env, config["default"])
