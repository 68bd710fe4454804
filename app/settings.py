from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App
    app_env: str = "dev"
    log_level: str = "INFO"

    # Infra
    database_url: str = "postgresql://app:app@db:5432/app"
    db_pool_min_size: int = 1
    db_pool_max_size: int = 10
    db_pool_timeout: float = 5.0
    db_connect_timeout: int = 3
    redis_url: str = "redis://redis:6379/0"
    redis_socket_timeout: float = 2.0
    notification_base_url: str = "http://notification-service:8082"

    # Security / policies
    bcrypt_rounds: int = 12
    jwt_secret: str = "change-me-in-production-please-32b"
    jwt_algorithm: str = "HS256"
    access_token_ttl_seconds: int = 900
    refresh_token_ttl_seconds: int = 7 * 24 * 3600
    reset_code_ttl_seconds: int = 600
    # Returning the reset code over HTTP is a placeholder until notifications ship.
    expose_reset_code: bool = False

    # Request gate allow-list
    public_paths: list[str] = [
        "/healthz",
        "/v1/auth/login",
        "/v1/auth/register",
        "/v1/auth/refresh",
        "/v1/auth/forgot-password",
        "/v1/auth/reset-password",
    ]
    public_path_prefixes: list[str] = [
        "/docs",
        "/redoc",
        "/openapi.json",
        "/v1/auth/google",
        "/v1/auth/github",
    ]

    # Object storage (S3-compatible, e.g. Backblaze B2)
    b2_endpoint: str = "https://s3.ams5.backblazeb2.com"
    b2_region: str = "eu-central-1"
    b2_key_id: str = ""
    b2_application_key: str = ""
    b2_bucket_name: str = "avatars"
    b2_public_cdn_base: str = "https://cdn.example.com"

    # Worker
    outbox_poll_interval_ms: int = 500

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
