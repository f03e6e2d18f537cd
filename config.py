from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    NODE_ENV: str = "development"

    # Either a full connection string or the PostgreSQL parts below
    DATABASE_URL: Optional[str] = None
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_HOST: str = "localhost"
    POSTGRES_DATABASE: str = "concept_learning"
    POSTGRES_PORT: str = "5432"  # Default port for PostgreSQL

    # Token signing - no defaults, the app refuses to start without them
    JWT_ACCESS_SECRET: str = Field(..., min_length=1)
    JWT_REFRESH_SECRET: str = Field(..., min_length=1)
    JWT_ACCESS_EXPIRY_MINUTES: int = Field(15, gt=0)
    JWT_REFRESH_EXPIRY_DAYS: int = Field(7, gt=0)

    # bcrypt cost factor (passlib accepts 4..31)
    BCRYPT_SALT_ROUNDS: int = Field(10, ge=4, le=31)

    REFRESH_COOKIE_NAME: str = "refreshToken"

    # CORS configuration - comma-separated list of allowed origins
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    LOG_LEVEL: str = "INFO"

    # Construct the full URL dynamically
    @property
    def POSTGRES_URL(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DATABASE}"
        )

    @property
    def cors_origin_list(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.NODE_ENV == "production"

    model_config = SettingsConfigDict(env_file=".env.development", extra="ignore")


settings = Settings()
