import json
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from pydantic import Field, SecretStr, field_validator
from typing import Annotated, Optional, List, Dict
from datetime import timedelta

class Settings(BaseSettings):
    # Application Settings
    APP_NAME: str = "SchoolPortal"
    VERSION: str = "1.0.0"
    DEBUG: bool = Field(default=False)

    # Database Settings
    DATABASE_URL: str = Field(default="sqlite+aiosqlite:///./schoolportal.db")
    DATABASE_ECHO: bool = Field(default=False)

    # Redis / cache settings
    REDIS_URL: str = Field(default="redis://localhost:6379/0")
    CACHE_TTL_SECONDS: int = Field(default=300)

    # Authentication Settings
    SECRET_KEY: str = Field(...)
    ALGORITHM: str = Field(default="HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=60 * 12)
    TOKEN_ISSUER: str = Field(default="schoolportal")

    # Cookie Settings
    COOKIE_SECURE: bool = Field(default=True)
    COOKIE_SAMESITE: str = Field(default="lax")

    # CORS Settings
    ALLOWED_ORIGINS: Annotated[List[str], NoDecode] = Field(
        default=[
            "http://localhost:3000",
            "http://127.0.0.1:3000"
        ]
    )

    # Logging Settings
    LOG_LEVEL: str = Field(default="INFO")
    LOG_DIR: Optional[str] = Field(default=None)
    LOG_TO_FILE: bool = Field(default=False)

    # Admin Settings
    SUPER_ADMIN_EMAIL: str = Field(default="superadmin@schoolportal.app")
    SUPER_ADMIN_PASSWORD: Optional[SecretStr] = Field(default=None)

    @field_validator('ALLOWED_ORIGINS', mode='before')
    @classmethod
    def parse_allowed_origins(cls, v):
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator('COOKIE_SAMESITE')
    @classmethod
    def validate_samesite(cls, v):
        allowed_values = ["lax", "strict", "none"]
        if v.lower() not in allowed_values:
            raise ValueError(f"COOKIE_SAMESITE must be one of {allowed_values}")
        return v.lower()

    @field_validator('LOG_LEVEL')
    @classmethod
    def validate_log_level(cls, v):
        return v.upper()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True
    )

# Initialize settings
settings = Settings()

# Helper Functions
def get_token_expires_delta(minutes: Optional[int] = None) -> timedelta:
    if minutes is None:
        minutes = settings.ACCESS_TOKEN_EXPIRE_MINUTES
    return timedelta(minutes=minutes)

def get_database_url() -> str:
    return settings.DATABASE_URL

def get_logging_config() -> Dict[str, Optional[str]]:
    return {
        "log_level": settings.LOG_LEVEL,
        "log_dir": settings.LOG_DIR,
        "log_to_file": settings.LOG_TO_FILE
    }
