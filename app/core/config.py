from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.core.rate_limit import RateLimitPolicy

DEV_AUTH_TOKEN_SECRET = "local-dev-auth-token-secret-change-me"

THROTTLED_ACTIONS = (
    "post",
    "comment",
    "profile",
    "server",
    "marketplace",
    "event",
    "ticket",
)


class Settings(BaseSettings):
    app_env: str = "local"
    api_port: int = 8000
    log_level: str = "INFO"

    postgres_host: str = "127.0.0.1"
    postgres_port: int = 5432
    postgres_db: str = "roleplay_realm"
    postgres_user: str = "realm_user"
    postgres_password: str = "realm_password"
    database_url_override: str | None = Field(
        default=None,
        validation_alias=AliasChoices("DATABASE_URL_OVERRIDE", "DATABASE_URL"),
    )
    db_pool_size: int = 10
    db_max_overflow: int = 20
    db_pool_timeout: int = 30
    db_auto_create: bool = False
    db_seed_defaults: bool = False

    auth_token_secret: str = DEV_AUTH_TOKEN_SECRET
    auth_token_ttl_minutes: int = 60 * 24
    owner_email: str = "owner@roleplayrealm.com"

    cors_allowed_origins_raw: str = "http://127.0.0.1:3000,http://localhost:3000"
    trusted_hosts_raw: str = "127.0.0.1,localhost"
    force_https: bool = False

    storage_public_base_url: str = "http://127.0.0.1:54321"
    upload_max_image_bytes: int = 10 * 1024 * 1024
    upload_max_video_bytes: int = 100 * 1024 * 1024

    rate_limit_cleanup_threshold: int = 1000
    rate_limit_post_window_ms: int = 60_000
    rate_limit_post_max_requests: int = 5
    rate_limit_comment_window_ms: int = 60_000
    rate_limit_comment_max_requests: int = 10
    rate_limit_profile_window_ms: int = 60_000
    rate_limit_profile_max_requests: int = 10
    rate_limit_server_window_ms: int = 3_600_000
    rate_limit_server_max_requests: int = 3
    rate_limit_marketplace_window_ms: int = 3_600_000
    rate_limit_marketplace_max_requests: int = 5
    rate_limit_event_window_ms: int = 3_600_000
    rate_limit_event_max_requests: int = 5
    rate_limit_ticket_window_ms: int = 3_600_000
    rate_limit_ticket_max_requests: int = 5

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False
    )

    @property
    def database_url(self) -> str:
        if self.database_url_override:
            return self.database_url_override
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def cors_allowed_origins(self) -> list[str]:
        return [
            origin.strip()
            for origin in self.cors_allowed_origins_raw.split(",")
            if origin.strip()
        ]

    @property
    def trusted_hosts(self) -> list[str]:
        return [
            host.strip() for host in self.trusted_hosts_raw.split(",") if host.strip()
        ]

    def rate_limit_policy(self, action: str) -> RateLimitPolicy:
        if action not in THROTTLED_ACTIONS:
            raise KeyError(f"Unknown throttled action '{action}'")
        return RateLimitPolicy(
            window_ms=getattr(self, f"rate_limit_{action}_window_ms"),
            max_requests=getattr(self, f"rate_limit_{action}_max_requests"),
        )

    def validate_security_settings(self) -> None:
        if self.app_env.lower() != "production":
            return

        if self.auth_token_secret == DEV_AUTH_TOKEN_SECRET:
            raise ValueError("AUTH_TOKEN_SECRET must be overridden in production.")
        if len(self.auth_token_secret) < 32:
            raise ValueError(
                "AUTH_TOKEN_SECRET must be at least 32 characters in production."
            )
        if not self.cors_allowed_origins:
            raise ValueError(
                "CORS_ALLOWED_ORIGINS_RAW must define explicit origins in production."
            )
        if "*" in self.cors_allowed_origins:
            raise ValueError("Wildcard CORS origin is not allowed in production.")
        if not self.trusted_hosts:
            raise ValueError(
                "TRUSTED_HOSTS_RAW must define explicit hosts in production."
            )
        if "*" in self.trusted_hosts:
            raise ValueError("Wildcard trusted host is not allowed in production.")


@lru_cache
def get_settings() -> Settings:
    return Settings()
