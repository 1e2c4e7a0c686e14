from pydantic_settings import BaseSettings
from typing import List
from pathlib import Path


class Settings(BaseSettings):
    PROJECT_NAME: str = "Waitlist API"
    API_V1_PREFIX: str = "/api/v1"

    # Database - defaults to a local SQLite file, override with environment variable for production
    DATABASE_URL: str = "sqlite:///./waitlist.db"
    # Fail fast instead of hanging when the database is unreachable
    DB_CONNECT_TIMEOUT_SECONDS: int = 5

    # Shared secret for the admin surface (sent as X-API-Key). Empty disables admin access.
    ADMIN_API_KEY: str = ""

    # Resend (Email)
    RESEND_API_KEY: str = ""
    EMAIL_FROM: str = "Waitlist <no-reply@example.com>"
    # Optional address that receives an alert for every new signup
    ADMIN_NOTIFY_EMAIL: str = ""

    # Estimated access date: ACCESS_BATCH_SIZE people let in every ACCESS_BATCH_INTERVAL_DAYS
    ACCESS_BATCH_SIZE: int = 100
    ACCESS_BATCH_INTERVAL_DAYS: int = 7

    # Redis (for rate limiting) - defaults to local, override for production
    REDIS_URL: str = "redis://localhost:6379"
    # Submissions allowed per client IP per minute; 0 disables the limiter
    WAITLIST_SUBMIT_LIMIT_PER_MINUTE: int = 0

    # App Settings
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:3002",
        "http://127.0.0.1:3000",
    ]

    class Config:
        # Use absolute path to .env file
        env_file = Path(__file__).parent.parent.parent / ".env"
        env_file_encoding = 'utf-8'
        extra = "ignore"


settings = Settings()
