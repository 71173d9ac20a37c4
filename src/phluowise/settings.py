"""Application settings and configuration."""

from decimal import Decimal
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PHLUOWISE_",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage
    storage_backend: Literal["sql", "memory"] = Field(
        default="sql",
        description="Key-value backend holding the collections",
    )
    database_url: str = Field(
        default="sqlite:///./phluowise.db",
        description="Database connection URL for the sql backend",
    )
    database_echo: bool = Field(
        default=False,
        description="Log every SQL statement",
    )
    key_prefix: str = Field(
        default="phluowise_",
        description="Prefix prepended to every storage key",
    )

    # Sessions
    session_ttl_days: int = Field(
        default=7,
        description="Lifetime of a login session in days",
    )

    # Referrals
    referral_code_length: int = Field(
        default=8,
        description="Length of generated referral codes",
    )
    referral_bonus: Decimal = Field(
        default=Decimal("50.00"),
        description="Bonus credited to the referrer when a referral completes",
    )
    referral_link_base: str = Field(
        default="https://phluowise.app/signup.html",
        description="Signup page the referral code is appended to",
    )

    # Payouts
    default_currency: str = Field(
        default="USD",
        description="Currency used when a payment method omits one",
    )
    payout_processing_days: int = Field(
        default=3,
        description="Days between a payout request and its expected processing",
    )
    monthly_window_days: int = Field(
        default=30,
        description="Window used for the monthly earnings figure",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_format: Literal["console", "json"] = Field(
        default="console",
        description="Log output format",
    )


# Global settings instance
settings = Settings()
