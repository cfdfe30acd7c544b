"""
Application Settings
Load from environment variables
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment"""

    # ======================
    # Reporting currency
    # ======================
    CURRENCY: str = "INR"
    USD_TO_INR_RATE: float = 83.0

    # ======================
    # Application
    # ======================
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"
    TIMEZONE: str = "Asia/Kolkata"

    # ======================
    # Instrument metadata
    # ======================
    INSTRUMENT_TYPES_FILE: str = "instrument_types.yml"

    # ======================
    # Pydantic v2 config
    # ======================
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="forbid",
    )

    @field_validator("CURRENCY")
    @classmethod
    def _upper_currency(cls, value: str) -> str:
        value = value.strip().upper()
        if value not in ("INR", "USD"):
            raise ValueError(f"Unsupported reporting currency: {value}")
        return value

    @field_validator("USD_TO_INR_RATE")
    @classmethod
    def _positive_rate(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("USD_TO_INR_RATE must be greater than 0")
        return value

    @property
    def currency(self) -> str:
        return self.CURRENCY

    @property
    def usd_to_inr_rate(self) -> float:
        return self.USD_TO_INR_RATE


settings = Settings()
