"""
Environment-aware configuration.
Secrets come from the environment (or a local .env); the development
fallbacks are rejected in production.
"""
import os
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()  # Read .env if present

DEV_ACCESS_SECRET = "dev-access-secret-change-me"
DEV_REFRESH_SECRET = "dev-refresh-secret-change-me"


class BaseConfig:
    DEBUG = False
    TESTING = False
    APP_ENV = os.getenv("APP_ENV", "dev")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    # CORS: in dev we usually allow '*', in prod supply a comma-separated list in env
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")

    # JWT: separate secrets for access and refresh tokens, one issuer for both
    JWT_ACCESS_SECRET = os.getenv("JWT_ACCESS_SECRET", DEV_ACCESS_SECRET)
    JWT_REFRESH_SECRET = os.getenv("JWT_REFRESH_SECRET", DEV_REFRESH_SECRET)
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_ISSUER = os.getenv("JWT_ISSUER", "fullstack-starterkit")
    JWT_AUDIENCE = os.getenv("JWT_AUDIENCE", "urn:fullstack-starterkit:audience")
    ACCESS_TOKEN_EXPIRES = timedelta(seconds=int(os.getenv("ACCESS_TOKEN_EXPIRES_SECONDS", str(6 * 3600))))
    REFRESH_TOKEN_EXPIRES = timedelta(seconds=int(os.getenv("REFRESH_TOKEN_EXPIRES_SECONDS", str(7 * 24 * 3600))))

    # Quran Foundation content API (OAuth2 client credentials)
    QF_CLIENT_ID = os.getenv("QF_CLIENT_ID")
    QF_CLIENT_SECRET = os.getenv("QF_CLIENT_SECRET")
    QF_OAUTH_BASE_URL = os.getenv("QF_OAUTH_BASE_URL", "https://prelive-oauth2.quran.foundation")
    QF_API_BASE_URL = os.getenv("QF_API_BASE_URL", "https://apis-prelive.quran.foundation")
    QF_SCOPE = os.getenv("QF_SCOPE", "content")
    QF_TOKEN_SAFETY_MARGIN = int(os.getenv("QF_TOKEN_SAFETY_MARGIN", "60"))
    QF_HTTP_TIMEOUT = float(os.getenv("QF_HTTP_TIMEOUT", "10"))


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")


class TestingConfig(BaseConfig):
    TESTING = True
    APP_ENV = "test"
    JWT_ACCESS_SECRET = "test-access-secret"
    JWT_REFRESH_SECRET = "test-refresh-secret"
    QF_CLIENT_ID = "test-client"
    QF_CLIENT_SECRET = "test-client-secret"
    QF_OAUTH_BASE_URL = "https://oauth.test"
    QF_API_BASE_URL = "https://api.test"


class ProductionConfig(BaseConfig):
    DEBUG = False
    APP_ENV = "prod"


def validate_config(config) -> None:
    """Fail fast when production would run on the development secrets."""
    if config.get("APP_ENV", "dev").lower() not in ("prod", "production"):
        return
    weak = [
        name
        for name, dev_value in (
            ("JWT_ACCESS_SECRET", DEV_ACCESS_SECRET),
            ("JWT_REFRESH_SECRET", DEV_REFRESH_SECRET),
        )
        if not config.get(name) or config.get(name) == dev_value
    ]
    if weak:
        raise RuntimeError(f"Missing required prod env vars: {', '.join(weak)}")


def get_config(name: str | None):
    """
    Select config class.
    - If name is provided, choose by name.
    - Else choose based on APP_ENV (dev/test/prod).
    """
    env = (name or os.getenv("APP_ENV", "dev")).lower()
    if env in ["prod", "production"]:
        return ProductionConfig
    if env in ["test", "testing"]:
        return TestingConfig
    return DevelopmentConfig
