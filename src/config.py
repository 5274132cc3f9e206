from pydantic_settings import BaseSettings
from typing import Optional

class Settings(BaseSettings):
    # Database
    DATABASE_URL: Optional[str] = None
    PGHOST: Optional[str] = None
    PGDATABASE: Optional[str] = None
    PGUSER: Optional[str] = None
    PGPASSWORD: Optional[str] = None
    PGSSLMODE: str = "require"

    # Security
    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Application
    PROJECT_NAME: str = "Transit Booking System"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Booking
    MAX_PASSENGERS_PER_BOOKING: int = 6
    BOOKING_REFERENCE_PREFIX: str = "TRNB"
    BOOKING_REFERENCE_MAX_ATTEMPTS: int = 3
    PAYMENT_SIMULATION_SUCCESS_RATE: float = 0.9

    # Schedule search cache
    SEARCH_CACHE_BACKEND: str = "memory"
    SEARCH_CACHE_TTL_SECONDS: int = 1800
    REDIS_URL: str = "redis://localhost:6379/0"

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        if self.PGHOST:
            return f"postgresql://{self.PGUSER}:{self.PGPASSWORD}@{self.PGHOST}/{self.PGDATABASE}?sslmode={self.PGSSLMODE}"
        return "sqlite:///./transit.db"

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
