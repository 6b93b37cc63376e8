import os
from typing import Optional
from dotenv import load_dotenv

load_dotenv()

class Settings:
    ENV: str = os.getenv("ENV", "local")
    APP_NAME: str = os.getenv("APP_NAME", "Family Auth")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    DATABASE_ECHO: bool = os.getenv("DATABASE_ECHO", "False").lower() == "true"
    DATABASE_POOL_SIZE: int = int(os.getenv("DATABASE_POOL_SIZE", 20))
    DATABASE_MAX_OVERFLOW: int = int(os.getenv("DATABASE_MAX_OVERFLOW", 10))

    # JWT
    JWT_ACCESS_SECRET: Optional[str] = os.getenv("JWT_ACCESS_SECRET")
    JWT_REFRESH_SECRET: Optional[str] = os.getenv("JWT_REFRESH_SECRET")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    # Lifetimes are in seconds
    JWT_ACCESS_EXPIRATION: int = int(os.getenv("JWT_ACCESS_EXPIRATION", 900))
    JWT_REFRESH_EXPIRATION: int = int(os.getenv("JWT_REFRESH_EXPIRATION", 604800))

    # Sessions
    SESSION_DEFAULT_TTL_SECONDS: int = int(os.getenv("SESSION_DEFAULT_TTL_SECONDS", 7 * 24 * 60 * 60))
    AUTH_COOKIE_SAMESITE: str = os.getenv("AUTH_COOKIE_SAMESITE", "lax")

    # CORS
    BACKEND_CORS_ORIGINS: Optional[str] = os.getenv("BACKEND_CORS_ORIGINS")

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "True").lower() == "true"
    RATE_LIMIT_REQUESTS: int = int(os.getenv("RATE_LIMIT_REQUESTS", 100))
    RATE_LIMIT_PERIOD_SECONDS: int = int(os.getenv("RATE_LIMIT_PERIOD_SECONDS", 60))

    # Redis
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")

    # Celery
    CELERY_BROKER_URL: str = os.getenv("CELERY_BROKER_URL", os.getenv("REDIS_URL", "redis://localhost:6379/0"))

    @property
    def cookie_secure(self) -> bool:
        return self.ENV == "production"

    def validate(self) -> None:
        """Fail fast on auth configuration that would produce unusable tokens."""
        errors = []
        if not self.JWT_ACCESS_SECRET:
            errors.append("JWT_ACCESS_SECRET is not set")
        if not self.JWT_REFRESH_SECRET:
            errors.append("JWT_REFRESH_SECRET is not set")
        if self.JWT_ACCESS_SECRET and self.JWT_ACCESS_SECRET == self.JWT_REFRESH_SECRET:
            errors.append("JWT_ACCESS_SECRET and JWT_REFRESH_SECRET must differ")
        if self.JWT_ACCESS_EXPIRATION <= 0:
            errors.append("JWT_ACCESS_EXPIRATION must be a positive number of seconds")
        if self.JWT_REFRESH_EXPIRATION <= 0:
            errors.append("JWT_REFRESH_EXPIRATION must be a positive number of seconds")
        if self.SESSION_DEFAULT_TTL_SECONDS <= 0:
            errors.append("SESSION_DEFAULT_TTL_SECONDS must be positive")
        if errors:
            raise RuntimeError("Invalid configuration: " + "; ".join(errors))


settings = Settings()
