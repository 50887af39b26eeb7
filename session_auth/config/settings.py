# session_auth/config/settings.py
from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from session_auth.core.duration import Duration


class Settings(BaseSettings):
    database_url: str = "sqlite:///./session_auth.db"
    db_statement_timeout_ms: int = 5000

    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    app_prefix: str = ""
    cors_origins: str = "http://localhost:5173,http://127.0.0.1:5173"

    # no defaults: a missing secret must stop the process at startup
    jwt_access_secret: str
    jwt_refresh_secret: str

    # <int><s|m|h|d>; parsed at load, see access_ttl / refresh_ttl
    jwt_access_ttl: str = "15m"
    jwt_refresh_ttl: str = "7d"
    jwt_issuer: str = "session-auth"

    bcrypt_rounds: int = 10

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("jwt_access_secret", "jwt_refresh_secret", "database_url", mode="before")
    @classmethod
    def strip_strings(cls, v):
        if isinstance(v, str):
            return v.strip().strip('"').strip("'")
        return v

    @field_validator("jwt_access_secret", "jwt_refresh_secret")
    @classmethod
    def secret_not_blank(cls, v: str) -> str:
        if not v:
            raise ValueError("JWT secret must not be empty")
        return v

    @field_validator("jwt_access_ttl", "jwt_refresh_ttl")
    @classmethod
    def ttl_is_duration(cls, v: str) -> str:
        return str(Duration.parse(v))

    @field_validator("bcrypt_rounds")
    @classmethod
    def rounds_in_range(cls, v: int) -> int:
        if not 4 <= v <= 31:
            raise ValueError("bcrypt_rounds must be between 4 and 31")
        return v

    @model_validator(mode="after")
    def secrets_are_disjoint(self) -> "Settings":
        if self.jwt_access_secret == self.jwt_refresh_secret:
            raise ValueError("JWT access and refresh secrets must differ")
        return self

    @property
    def access_ttl(self) -> Duration:
        return Duration.parse(self.jwt_access_ttl)

    @property
    def refresh_ttl(self) -> Duration:
        return Duration.parse(self.jwt_refresh_ttl)

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def api_prefix(self) -> str:
        return f"{self.app_prefix.rstrip('/')}/api"


@lru_cache
def get_settings() -> Settings:
    return Settings()
