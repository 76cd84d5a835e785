from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional

BASE_DIR = Path(__file__).resolve().parent.parent
ENV_FILE = BASE_DIR / ".env"


class Settings(BaseSettings):
    # Application
    PROJECT_NAME: str = "MealPlannr"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/mealplannr/v1"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Security
    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 10080  # 7 days
    INVITATION_TOKEN_EXPIRE_HOURS: int = 168

    # Database
    # Default to a local sqlite file for development; override via .env in production.
    DATABASE_URL: str = "sqlite:///./meal_plannr.db"

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # Households and networks
    MAX_HOUSEHOLDS_PER_NETWORK: int = 10
    HOUSEHOLD_MAX_MEMBERS: int = 4

    # Recipes
    ACCESSIBLE_RECIPES_DEFAULT_LIMIT: int = 20
    # Legacy listing behaviour: recipes without sharing settings show up for everyone
    UNSHARED_RECIPES_PUBLIC: bool = False

    # Email
    APP_BASE_URL: str = "http://localhost:8000"
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_USERNAME: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    SMTP_USE_TLS: bool = True
    EMAILS_FROM_EMAIL: str = "noreply@mealplannr.local"
    EMAILS_FROM_NAME: str = "MealPlannr"

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE), case_sensitive=True, extra="ignore"
    )


settings = Settings()
