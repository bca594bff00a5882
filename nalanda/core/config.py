"""
Application settings and configuration module.
Loads environment variables and provides application configuration.
"""
from typing import List, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings class.
    Loads settings from environment variables and provides default values.
    """
    # Project settings
    PROJECT_NAME: str = "Nalanda E-Book Platform"
    DEBUG: bool = Field(default=False)

    # Server settings
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8000)
    GATEWAY_PORT: int = Field(default=3001)
    ALLOWED_ORIGINS: List[str] = Field(default_factory=lambda: ["http://localhost:3000"])

    # Security
    SECRET_KEY: str = Field(...)
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=60 * 24)  # 1 day
    ALGORITHM: str = Field(default="HS256")
    PASSWORD_RESET_TOKEN_EXPIRE_MINUTES: int = Field(default=30)

    # Database
    DATABASE_URL: str = Field(default="sqlite:///./nalanda.db")

    # Google OAuth
    GOOGLE_CLIENT_ID: Optional[str] = None
    GOOGLE_CLIENT_SECRET: Optional[str] = None
    GOOGLE_TOKEN_URL: str = Field(default="https://oauth2.googleapis.com/token")
    GOOGLE_USERINFO_URL: str = Field(default="https://www.googleapis.com/oauth2/v2/userinfo")
    OAUTH_TIMEOUT_SECONDS: int = Field(default=10)

    # Free reader limits
    FREE_READER_DAILY_CHUNKS: int = Field(default=20)
    FREE_READER_MONTHLY_CHUNKS: int = Field(default=200)
    PREVIEW_CHUNK_COUNT: int = Field(default=1)

    # Default admin, seeded on startup only when a password is configured
    ADMIN_EMAIL: str = Field(default="admin@nalanda.com")
    ADMIN_NAME: str = Field(default="Administrator")
    ADMIN_PASSWORD: Optional[str] = None

    # Gateway
    AUTH_SERVICE_URL: str = Field(default="http://localhost:8000")
    BOOK_SERVICE_URL: str = Field(default="http://localhost:8000")
    PROXY_TIMEOUT_SECONDS: int = Field(default=5)
    SESSION_COOKIE_NAME: str = Field(default="nalanda_session")

    # Logging
    LOG_LEVEL: str = Field(default="INFO")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        allowed_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed_levels:
            return "INFO"
        return v.upper()

    model_config = {
        "env_file": ".env",
        "case_sensitive": True,
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


# Initialize settings
settings = Settings()  # type: ignore
