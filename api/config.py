"""
Environment-aware configuration.
Values are read once when the app is created and never mutated afterwards;
the session manager receives the secret and lifetimes as arguments.
"""
import os
from dotenv import load_dotenv
from datetime import timedelta

load_dotenv()  # Read .env if present


class BaseConfig:
    DEBUG = False
    TESTING = False
    # CORS: in dev we usually allow '*', in prod supply a comma-separated list in env
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    APP_ENV = os.getenv("APP_ENV", "dev")
    # "dev" unlocks POST /admin/reset
    PLATFORM = os.getenv("PLATFORM", "")
    DATABASE_URL = os.getenv("DB_URL", "sqlite:///chirpy.db")
    SQL_ECHO = False
    # token configuration
    JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret-change-me")
    JWT_ISSUER = os.getenv("JWT_ISSUER", "chirpy")
    ACCESS_TOKEN_EXPIRES = timedelta(seconds=int(os.getenv("ACCESS_TOKEN_EXPIRES_SECONDS", "3600")))
    REFRESH_TOKEN_EXPIRES = timedelta(hours=int(os.getenv("REFRESH_TOKEN_EXPIRES_HOURS", "144")))
    # directory served under /app/
    FILESERVER_ROOT = os.path.abspath(os.getenv("FILESERVER_ROOT", "public"))


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    SQL_ECHO = os.getenv("SQL_ECHO", "0").lower() in ("1", "true", "yes")


class ProductionConfig(BaseConfig):
    DEBUG = False


class TestingConfig(BaseConfig):
    TESTING = True
    PLATFORM = "dev"
    DATABASE_URL = "sqlite:///:memory:"
    JWT_SECRET = "testing-secret-that-is-long-enough-for-hs256"


def get_config(name: str | None):
    """
    Select config class.
    - If name is provided, choose by name.
    - Else choose based on APP_ENV (dev/prod/test).
    """
    env = (name or os.getenv("APP_ENV", "dev")).lower()
    if env in ["prod", "production"]:
        return ProductionConfig
    if env in ["test", "testing"]:
        return TestingConfig
    return DevelopmentConfig
