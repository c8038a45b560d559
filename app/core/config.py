from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_env: str = Field(default="dev", alias="APP_ENV")
    app_host: str = Field(default="0.0.0.0", alias="APP_HOST")
    app_port: int = Field(default=8000, alias="APP_PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    internal_api_token: str = Field(
        default="dev_internal_token_change_me",
        alias="INTERNAL_API_TOKEN",
    )
    internal_api_allowlist: str = Field(
        default="127.0.0.1/32,::1/128",
        alias="INTERNAL_API_ALLOWLIST",
    )
    internal_api_trusted_proxies: str = Field(default="", alias="INTERNAL_API_TRUSTED_PROXIES")

    identity_header: str = Field(default="X-User-Id", alias="IDENTITY_HEADER")
    geo_country_headers: str = Field(
        default="x-vercel-ip-country,cf-ipcountry,x-country",
        alias="GEO_COUNTRY_HEADERS",
    )

    subscription_term_days: int = Field(default=30, ge=1, alias="SUBSCRIPTION_TERM_DAYS")
    platform_fee_bps: int = Field(default=0, ge=0, le=9_999, alias="PLATFORM_FEE_BPS")
    wallet_max_deposit_cents: int = Field(default=100_000, gt=0, alias="WALLET_MAX_DEPOSIT_CENTS")
    ledger_audit_stale_pending_hours: int = Field(
        default=24,
        ge=1,
        alias="LEDGER_AUDIT_STALE_PENDING_HOURS",
    )

    database_url: str = Field(alias="DATABASE_URL")
    db_pool_size: int = Field(default=10, alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=20, alias="DB_MAX_OVERFLOW")
    db_echo: bool = Field(default=False, alias="DB_ECHO")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
