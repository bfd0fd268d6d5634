"""Configuration management for the mutualmatch library."""

from typing import Any, Optional

from pydantic import BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from mutualmatch.utils.errors import ConfigurationError


class Settings(BaseSettings):
    """Library settings loaded from environment variables."""

    # Store Configuration
    STORE_ENDPOINT: str = "sqlite:///mutualmatch.db"
    STORE_USERNAME: Optional[str] = None
    STORE_PASSWORD: Optional[SecretStr] = None
    STORE_TIMEOUT: float = 5.0

    # Redis Configuration (profile cache, optional)
    REDIS_URL: Optional[str] = None
    PROFILE_CACHE_TTL: int = 3600

    # Sentry Configuration
    SENTRY_DSN: Optional[str] = None

    # Application Configuration
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"
    DEBUG: bool = Field(default=False)

    @field_validator("DEBUG", mode="before")
    @classmethod
    def blank_debug_is_off(cls, v: Any) -> Any:
        """Treat an empty DEBUG variable as unset; other values use pydantic's bool parsing."""
        if isinstance(v, str) and not v.strip():
            return False
        return v

    @field_validator("STORE_TIMEOUT")
    @classmethod
    def positive_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("STORE_TIMEOUT must be positive")
        return v

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore")


class StoreCredentials(BaseModel):
    """Username/password pair injected into the store URL."""

    username: str
    password: Optional[SecretStr] = None


class StoreConfig(BaseModel):
    """
    Connection settings for the match store.

    `endpoint` is a SQLAlchemy database URL. Credentials, when given, override
    any user info embedded in the URL. `timeout` bounds both connecting and
    waiting for a pooled connection, in seconds.
    """

    endpoint: str
    credentials: Optional[StoreCredentials] = None
    timeout: float = 5.0

    @field_validator("endpoint")
    @classmethod
    def normalize_endpoint(cls, v: str) -> str:
        if not v or not v.strip():
            raise ConfigurationError("Store endpoint is not configured")
        v = v.strip()
        # SQLAlchemy 1.4+ requires postgresql:// instead of postgres://
        if v.startswith("postgres://"):
            v = v.replace("postgres://", "postgresql://", 1)
        return v

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "StoreConfig":
        """Build a store config from the global (or given) settings."""
        settings = settings or get_settings()
        credentials = None
        if settings.STORE_USERNAME:
            credentials = StoreCredentials(username=settings.STORE_USERNAME, password=settings.STORE_PASSWORD)
        return cls(endpoint=settings.STORE_ENDPOINT, credentials=credentials, timeout=settings.STORE_TIMEOUT)


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the settings instance, loading it from the environment on first use."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Forget the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
