"""Application configuration and persistence backend resolution"""
from typing import List, NamedTuple, Optional

from pydantic_settings import BaseSettings
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from tokenledger.errors import ConfigurationError

DEFAULT_TABLE_NAME = "auth_tokens"


class Settings(BaseSettings):
    """Application settings"""

    # Database (no default: the ledger refuses to run without a durable backend)
    DATABASE_URL: Optional[str] = None
    DATABASE_POOL_SIZE: int = 20
    DATABASE_MAX_OVERFLOW: int = 10
    DATABASE_POOL_TIMEOUT: int = 30
    DATABASE_POOL_RECYCLE: int = 3600  # Recycle connections after 1 hour

    # Token table
    TOKEN_TABLE_NAME: str = DEFAULT_TABLE_NAME
    TOKEN_SCHEMA: Optional[str] = None  # e.g. "auth" on Postgres

    # Authentication for maintenance endpoints
    ADMIN_API_KEY: str = "admin-secret-key-change-in-production"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"  # json or text

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000"

    # JWT
    JWT_SECRET_KEY: Optional[str] = None     # auto-generated per process if absent
    JWT_ALGORITHM: str = "HS256"
    JWT_ISSUER: str = "tokenledger"
    JWT_AUDIENCE: Optional[str] = None
    JWT_ACCESS_EXPIRE_SECONDS: int = 3600     # 1 hour
    JWT_REFRESH_EXPIRE_SECONDS: int = 2592000  # 30 days

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins string into list"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]


class StoreConfig(NamedTuple):
    """Everything the token store needs, resolved once at startup."""
    engine: Engine
    table_name: str = DEFAULT_TABLE_NAME
    schema: Optional[str] = None  # None = backend default namespace


def resolve_store_config(settings: "Settings") -> StoreConfig:
    """Build a :class:`StoreConfig` from settings.

    Raises:
        ConfigurationError: if ``DATABASE_URL`` is not set. Callers treat this as
            fatal; there is no fallback backend.
    """
    if not settings.DATABASE_URL:
        raise ConfigurationError("tokenledger requires DATABASE_URL to be set")

    engine_kwargs = {"pool_pre_ping": True}
    if not settings.DATABASE_URL.startswith("sqlite"):
        engine_kwargs.update(
            pool_size=settings.DATABASE_POOL_SIZE,
            max_overflow=settings.DATABASE_MAX_OVERFLOW,
            pool_timeout=settings.DATABASE_POOL_TIMEOUT,
            pool_recycle=settings.DATABASE_POOL_RECYCLE,
        )

    engine = create_engine(settings.DATABASE_URL, **engine_kwargs)
    return StoreConfig(
        engine=engine,
        table_name=settings.TOKEN_TABLE_NAME or DEFAULT_TABLE_NAME,
        schema=settings.TOKEN_SCHEMA or None,
    )


settings = Settings()
