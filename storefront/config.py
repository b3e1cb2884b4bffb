"""
Configuration: loaded once at process start, passed explicitly.

    settings = Settings.load()
    gateway = MomoGateway(settings.momo)

Every value comes from the environment (prefix STOREFRONT_) or a .env file.
Wallet credentials live under STOREFRONT_MOMO_*.
"""

from __future__ import annotations

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


# ═══════════════════════════════════════════════════════════════════════════════
# Wallet provider
# ═══════════════════════════════════════════════════════════════════════════════


class MomoSettings(BaseSettings):
    """Credentials and endpoints for the MoMo capture-wallet flow."""

    model_config = SettingsConfigDict(
        env_prefix="STOREFRONT_MOMO_",
        env_file=".env",
        extra="ignore",
    )

    partner_code: str = ""
    access_key: str = ""
    secret_key: SecretStr = SecretStr("")
    endpoint: str = "https://test-payment.momo.vn/v2/gateway/api/create"
    redirect_url: str = "http://localhost:3000"
    ipn_url: str = "http://localhost:8000/api/payments/success"
    request_type: str = "captureWallet"
    lang: str = "vi"
    timeout_seconds: float = 10.0
    # Note: 1 means no automatic retry. Retries reuse the same requestId.
    max_attempts: int = Field(default=1, ge=1)


# ═══════════════════════════════════════════════════════════════════════════════
# Application
# ═══════════════════════════════════════════════════════════════════════════════


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="STOREFRONT_",
        env_file=".env",
        extra="ignore",
    )

    # Database
    database_url: str = "sqlite+aiosqlite:///./storefront.db"
    create_tables: bool = True
    # Note: None keeps the driver default. Use "READ COMMITTED" on PostgreSQL;
    # SQLite accepts only SERIALIZABLE / READ UNCOMMITTED.
    isolation_level: str | None = None

    # Pricing
    free_shipping_threshold: int = 1_000_000
    shipping_fee: int = 30_000

    # Notifications
    notify_timeout_seconds: float = 10.0
    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_user: str | None = None
    smtp_password: SecretStr | None = None
    smtp_sender: str = "Fashion Store <no-reply@localhost>"
    smtp_use_tls: bool = True

    # Logging
    log_level: str = "INFO"

    # HTTP
    host: str = "127.0.0.1"
    port: int = 8000

    momo: MomoSettings = Field(default_factory=MomoSettings)

    @classmethod
    def load(cls) -> Settings:
        return cls()


__all__ = (
    "MomoSettings",
    "Settings",
)
