"""Configuration management using Pydantic Settings"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from paycycle_ledger.domain.models import PaydayAdjustment


class Settings(BaseSettings):
    """Application configuration loaded from environment variables (PAYCYCLE_*)"""

    model_config = SettingsConfigDict(
        env_prefix="PAYCYCLE_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Database
    database_url: str = "sqlite:///./paycycle.db"

    # Service
    service_name: str = "paycycle-ledger"
    log_level: str = "INFO"

    # Payday used until the user sets their own
    default_payday: int = Field(25, ge=1, le=31)
    default_payday_adjustment: PaydayAdjustment = PaydayAdjustment.BEFORE_WEEKEND

    # Recurring scheduler: record transactions automatically, or only remind
    recurring_auto_execute: bool = True


settings = Settings()
