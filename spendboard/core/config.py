from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App settings
    PROJECT_NAME: str = "Spendboard"
    API_PREFIX: str = "/api"
    DEBUG: bool = Field(default=False)
    LOG_LEVEL: str = Field(default="INFO")

    # Currencies
    DEFAULT_DISPLAY_CURRENCY: str = Field(default="USD")
    BASE_CURRENCY: str = Field(default="USD")

    # Category breakdown: leaves under this share (%) fold into "Other"
    OTHER_CUTOFF_PERCENT: float = Field(default=3.0, ge=0, lt=100)

    # Anomaly detection
    ANOMALY_RATIO: float = 3.0
    ANOMALY_HIGH_RATIO: float = 5.0
    ANOMALY_FLOOR: float = 50.0
    ANOMALY_MIN_SAMPLES: int = 2
    NEW_MERCHANT_LARGE_AMOUNT: float = 250.0
    ANOMALY_FREQUENCY_MULTIPLIER: float = 2.0
    ANOMALY_LOOKBACK_DAYS: int = Field(default=7, ge=1)

    # Budget pacing
    PACE_TOLERANCE: float = 1.1

    TOP_N: int = 5
    SUMMARY_CACHE_SIZE: int = 64

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)


settings = Settings()
