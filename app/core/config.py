from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # App
    app_name: str = "OwnaFarm"
    app_env: str = "development"
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:3000"]

    # Database
    database_url: str = "sqlite:///./ownafarm_auth.db"

    # Redis (nonces + rate limit counters)
    redis_url: str = "redis://localhost:6379/0"

    # JWT
    jwt_secret: str
    jwt_alg: str = "HS256"
    jwt_expiration_hours: int = 24
    jwt_issuer: str = "ownafarm"
    jwt_admin_issuer: str = "ownafarm-admin"

    # Wallet auth
    nonce_ttl_minutes: int = 5
    eip712_name: str = "OwnaFarm"
    eip712_version: str = "1"
    eip712_chain_id: int = 5000

    # Login rate limiting
    rate_limit_max_attempts: int = 5
    rate_limit_window_minutes: int = 15


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
