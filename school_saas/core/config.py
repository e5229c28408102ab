import os
import json
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, EmailStr, field_validator
from typing import Optional, List, Dict
from datetime import timedelta

class Settings(BaseSettings):
    # Application Settings
    APP_NAME: str = "School Management API"
    VERSION: str = "1.0.0"
    DEBUG: bool = Field(default=False)
    API_PREFIX: str = Field(default="/api")

    # Database Settings
    DATABASE_URL: str = Field(default="sqlite+aiosqlite:///./school_saas.db")
    DATABASE_ECHO: bool = Field(default=False)

    # Authentication Settings
    SECRET_KEY: str = Field(...)
    ALGORITHM: str = Field(default="HS256")
    ACCESS_TOKEN_EXPIRE_DAYS: int = Field(default=3)
    BCRYPT_ROUNDS: int = Field(default=12)

    # CORS Settings
    ALLOWED_ORIGINS: List[str] = Field(
        default=[
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:3000",
            "http://127.0.0.1:3000"
        ]
    )

    # Logging Settings
    LOG_LEVEL: str = Field(default="INFO")
    LOG_DIR: Optional[str] = Field(default=None)

    # Bootstrap admin, created on startup when both are set
    ADMIN_EMAIL: Optional[EmailStr] = Field(default=None)
    ADMIN_PASSWORD: Optional[str] = Field(default=None)

    @field_validator('SECRET_KEY')
    @classmethod
    def validate_secret_key(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("SECRET_KEY must not be empty")
        return v

    @field_validator('ALLOWED_ORIGINS', mode='before')
    @classmethod
    def parse_allowed_origins(cls, v):
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator('LOG_LEVEL')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {v}")
        return level

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True
    )

# Initialize settings
settings = Settings()

# Helper Functions
def get_token_expires_delta(days: Optional[int] = None) -> timedelta:
    if days is None:
        days = settings.ACCESS_TOKEN_EXPIRE_DAYS
    return timedelta(days=days)

def get_database_url() -> str:
    return settings.DATABASE_URL

def get_jwt_settings() -> dict:
    return {
        "secret_key": settings.SECRET_KEY,
        "algorithm": settings.ALGORITHM,
        "access_token_expire_days": settings.ACCESS_TOKEN_EXPIRE_DAYS,
    }

def get_logging_config() -> Dict[str, Optional[str]]:
    log_dir = settings.LOG_DIR
    return {
        "log_level": settings.LOG_LEVEL,
        "log_dir": os.path.abspath(log_dir) if log_dir else None
    }
