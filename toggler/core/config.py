"""Configuration settings for the Toggler backend.

Settings are read from environment variables (and an optional ``.env`` file).
"""

from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Toggler settings.

    Attributes:
        PROJECT_NAME: Name used for the FastAPI app title.
        ENVIRONMENT: Deployment environment (local, dev, prd).
        LOCAL_DEVELOPMENT: Whether the backend runs on a developer machine.
        LOG_LEVEL: Root log level for the toggler logger.
        API_PREFIX: Path prefix under which the HTTP routes are mounted.
        POSTGRES_HOST: Postgres host.
        POSTGRES_PORT: Postgres port.
        POSTGRES_USER: Postgres user.
        POSTGRES_PASSWORD: Postgres password.
        POSTGRES_DB: Postgres database name.
        DATABASE_URL: Full async database URL; overrides the POSTGRES_* fields when set.
        DB_ECHO: Echo SQL statements (debugging only).
        DB_POOL_SIZE: Connection pool size for server databases.
        REDIS_HOST: Redis host used as the notification bus.
        REDIS_PORT: Redis port.
        REDIS_DB: Redis database index.
        REDIS_PASSWORD: Optional Redis password.
        NOTIFICATIONS_ENABLED: Publish toggle state changes to the bus.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", case_sensitive=True)

    PROJECT_NAME: str = "Toggler"
    ENVIRONMENT: str = "local"
    LOCAL_DEVELOPMENT: bool = False
    LOG_LEVEL: str = "INFO"
    API_PREFIX: str = "/api"

    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "toggler"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DB: str = "toggler"
    DATABASE_URL: Optional[str] = None
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = 20

    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: Optional[str] = None

    NOTIFICATIONS_ENABLED: bool = True

    @field_validator("LOG_LEVEL")
    @classmethod
    def _normalize_log_level(cls, v: str) -> str:
        return v.upper()

    @field_validator("ENVIRONMENT")
    @classmethod
    def _check_environment(cls, v: str) -> str:
        if v not in ("local", "dev", "prd", "test"):
            raise ValueError(f"Unknown ENVIRONMENT '{v}'")
        return v

    @property
    def SQLALCHEMY_ASYNC_DATABASE_URI(self) -> str:
        """Async database URL used by the SQLAlchemy engine."""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def is_sqlite(self) -> bool:
        """Whether the configured database is SQLite (tests, local demos)."""
        return self.SQLALCHEMY_ASYNC_DATABASE_URI.startswith("sqlite")


settings = Settings()
