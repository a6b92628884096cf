"""
Application Configuration Settings
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List
import os


class Settings(BaseSettings):
    """Application settings"""

    # Application
    APP_NAME: str = "Travel & Expense Approval System"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Database
    DATABASE_URL: str
    DATABASE_ECHO: bool = False

    # JWT (tokens are issued by the identity provider, verified here)
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # SMTP Configuration
    SMTP_SERVER: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_TIMEOUT_SECONDS: int = 10
    FROM_EMAIL: str = ""
    FROM_NAME: str = "Travel & Expense Management"

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:8000"  # Comma-separated string

    @property
    def cors_origins_list(self) -> List[str]:
        """Convert comma-separated string to list"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIRECTORY: str = "logs"
    LOG_FILE: str = "logs/app.log"

    # Notification fan-out
    NOTIFICATION_WRITE_ATTEMPTS: int = 3
    NOTIFICATION_RETRY_DELAY_SECONDS: float = 0.5

    # Pagination
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100
    NOTIFICATION_PAGE_SIZE: int = 20

    # Display formats used in notification and email text
    DISPLAY_DATE_FORMAT: str = "%d-%m-%Y"
    DISPLAY_DATETIME_FORMAT: str = "%d-%m-%Y %H:%M:%S"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)


# Create settings instance
settings = Settings()


# Ensure log directory exists
os.makedirs(settings.LOG_DIRECTORY, exist_ok=True)
