from pydantic import field_validator
from pydantic_settings import BaseSettings
from typing import List, Any
import json
import re

ACADEMIC_YEAR_PATTERN = re.compile(r'^(\d{4})-(\d{4})$')

def parse_cors_origins(v: Any) -> List[str]:
    """Parse CORS origins from a JSON list or a comma-separated string"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        if v.startswith('['):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        return [origin.strip() for origin in v.split(',') if origin.strip()]
    return []

class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    # ==========================================
    # Application
    # ==========================================
    APP_NAME: str = "Academia Pro"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    SECRET_KEY: str
    API_VERSION: str = "v1"
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8000

    # ==========================================
    # Database (PostgreSQL via asyncpg, SQLite via aiosqlite in tests)
    # ==========================================
    DATABASE_URL: str
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 0
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800
    DB_ECHO: bool = False

    # Rate limit storage; empty keeps counters in process memory
    REDIS_URL: str = ""

    # ==========================================
    # Authentication
    # ==========================================
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440  # 24 hours
    REFRESH_TOKEN_EXPIRE_DAYS: int = 30
    BCRYPT_ROUNDS: int = 12  # 4 in tests

    # ==========================================
    # HTTP
    # ==========================================
    CORS_ORIGINS_STR: str = "http://localhost:3000,http://127.0.0.1:3000"
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PER_MINUTE: int = 60
    RATE_LIMIT_PER_HOUR: int = 1000
    MAX_UPLOAD_SIZE: int = 10485760  # 10MB

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/app.log"

    # ==========================================
    # School year and grading
    # ==========================================
    CURRENT_ACADEMIC_YEAR: str = "2026-2027"
    PASSING_PERCENTAGE: float = 50.0
    FINAL_GRADE_LEVEL: str = "Grade 12"  # graduation is only open to this grade

    # ==========================================
    # Library circulation
    # ==========================================
    LIBRARY_LOAN_DAYS: int = 14
    LIBRARY_MAX_RENEWALS: int = 2
    LIBRARY_MAX_ACTIVE_LOANS: int = 5
    LIBRARY_FINE_PER_DAY: float = 0.5
    LIBRARY_RESERVATION_HOLD_DAYS: int = 3

    # ==========================================
    # Student portal and mobile
    # ==========================================
    WELLNESS_TREND_MAX_RECORDS: int = 90
    DEFAULT_CURRENCY: str = "USD"
    MOBILE_SYNC_MAX_ITEMS: int = 200

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # .env files are shared with the web frontend

    @field_validator("CURRENT_ACADEMIC_YEAR")
    @classmethod
    def validate_academic_year(cls, value: str) -> str:
        match = ACADEMIC_YEAR_PATTERN.match(value)
        if not match or int(match.group(2)) != int(match.group(1)) + 1:
            raise ValueError("CURRENT_ACADEMIC_YEAR must look like 2026-2027")
        return value

    @field_validator("PASSING_PERCENTAGE")
    @classmethod
    def validate_percentage(cls, value: float) -> float:
        if not 0 <= value <= 100:
            raise ValueError("PASSING_PERCENTAGE must be between 0 and 100")
        return value

    @field_validator("LIBRARY_LOAN_DAYS", "LIBRARY_MAX_ACTIVE_LOANS", "MOBILE_SYNC_MAX_ITEMS")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be at least 1")
        return value

    @property
    def CORS_ORIGINS(self) -> List[str]:
        return parse_cors_origins(self.CORS_ORIGINS_STR)

    @property
    def rate_limit_storage_uri(self) -> str:
        """Redis when configured, otherwise slowapi's in-process storage"""
        return self.REDIS_URL or "memory://"

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    def is_dev_mode(self) -> bool:
        return self.ENVIRONMENT == "development" or self.DEBUG


settings = Settings()
