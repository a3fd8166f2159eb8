from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # App Config
    APP_NAME: str = "Lift Billing API"

    # Billing
    CURRENCY: str = "INR"
    DEFAULT_PAGE_SIZE: int = 50

    # Security
    CORS_ORIGINS: list[str] = ["*"]
    RATE_LIMIT_ENABLED: bool = True

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


@lru_cache()
def get_settings():
    return Settings()
