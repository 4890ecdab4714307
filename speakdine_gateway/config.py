"""Configuration management using Pydantic Settings"""

from decimal import Decimal
from typing import List
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Payment processor
    stripe_secret_key: str = ""
    app_base_url: str = "http://localhost:5000"
    default_currency: str = "pkr"

    # Service
    service_name: str = "speakdine-gateway"
    log_level: str = "INFO"
    cors_allow_origins: List[str] = ["*"]

    # Fee schedule
    processor_rate_percent: Decimal = Field(Decimal("2.9"), ge=0, lt=100)
    processor_fixed_fee_paisa: int = Field(1100, ge=0)  # Rs 11.00 per transaction
    commission_rate_percent: Decimal = Field(Decimal("5"), ge=0, le=100)
    waive_surcharge_on_zero_total: bool = True


settings = Settings()
