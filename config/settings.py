from pydantic_settings import BaseSettings
from typing import List
import json


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./travel_planner.db"
    DATABASE_POOL_SIZE: int = 2
    DATABASE_MAX_OVERFLOW: int = 8
    DATABASE_POOL_TIMEOUT: int = 30
    DATABASE_ECHO: bool = False

    # JWT
    JWT_SECRET_KEY: str = "change-me-in-production"
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440

    # Security
    BACKEND_CORS_ORIGINS: str = '["http://localhost:3000"]'

    @property
    def cors_origins(self) -> List[str]:
        try:
            return json.loads(self.BACKEND_CORS_ORIGINS)
        except json.JSONDecodeError:
            return ["http://localhost:3000"]

    # Application
    APP_NAME: str = "Travel Planner"
    APP_VERSION: str = "1.0.0"
    API_V1_PREFIX: str = "/api"
    DEBUG: bool = True

    # Currency (display only, amounts are single-currency)
    DEFAULT_CURRENCY: str = "PKR"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
