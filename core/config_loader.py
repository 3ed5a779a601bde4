from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./guardshift.db"
    BACKEND_CORS_ORIGINS: List[str] = []

    # Labor-law day boundaries are local, not UTC
    LOCAL_TIMEZONE: str = "Asia/Ho_Chi_Minh"
    NEAR_EXPIRY_DAYS: int = 7

    OUTBOX_MAX_ATTEMPTS: int = 10
    OUTBOX_RELAY_BATCH: int = 100

    LOG_LEVEL: str = "INFO"

    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_USE_TLS: bool = True
    SMTP_USERNAME: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    SMTP_SENDER: str = "no-reply@guardshift.local"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
