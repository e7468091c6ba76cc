import os
from typing import List
from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings

# Load environment variables from the correct .env file
env_file = ".env" if os.getenv("APP_ENV", "development") == "development" else ".env.production"
load_dotenv(env_file)  # Load the .env file

class Settings(BaseSettings):
    APP_ENV: str = "development"
    DEBUG: bool = False
    DATABASE_URL: str = "sqlite+aiosqlite:///./healthcomm.db"
    AUTO_CREATE_TABLES: bool = True
    JWT_SECRET: str = "change-me-in-production"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRATION_MINUTES: int = 60
    ALLOWED_ORIGINS: List[str] = ["*"]
    LOG_LEVEL: str = "info"

    # Care team
    DEFAULT_MAX_PATIENTS: int = 50
    ESCALATION_WINDOW_HOURS: int = 24
    ESCALATION_HIGH_ALERT_COUNT: int = 2
    INVITATION_TTL_DAYS: int = 7
    NOTIFICATION_RETENTION_DAYS: int = 30
    EXPORT_MAX_RECORDS: int = 10000

    # Scheduled sweeps
    SCHEDULER_ENABLED: bool = True
    SCHEDULER_TIMEZONE: str = "America/New_York"
    SCHEDULER_POLL_SECONDS: int = 60
    INVITATION_CLEANUP_CRON: str = "0 0 * * *"  # daily at midnight
    NOTIFICATION_CLEANUP_CRON: str = "0 2 * * 0"  # Sunday 2 AM
    DAILY_REPORT_CRON: str = "0 6 * * *"  # daily at 6 AM

    @field_validator("ALLOWED_ORIGINS", mode="before")
    def split_origins(cls, value):
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

settings = Settings()
