from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    ENVIRONMENT: str = "development"  # development | test | staging | production
    APP_NAME: str = "GlucoTrack"
    SECRET_KEY: str = "change-me-in-production"
    DATABASE_URL: str | None = None
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:9002",
    ]
    LOG_LEVEL: str = "INFO"
    JWT_ALGORITHM: str = "HS256"
    SESSION_MAX_AGE_DAYS: int = 7
    AUTH_COOKIE_NAME: str = "glucotrack_session"
    AUTH_COOKIE_SECURE: bool = False
    AUTH_COOKIE_HTTPONLY: bool = True
    AUTH_COOKIE_SAMESITE: str = "lax"  # strict | lax | none
    AUTH_COOKIE_PATH: str = "/"
    REMINDER_AI_PROVIDER: str = "google"  # anthropic | openai | google
    REMINDER_AI_API_KEY: str | None = None
    REMINDER_AI_MODEL: str | None = None
    REMINDER_AI_TIMEOUT_SECONDS: float = 30.0
    REMINDER_MAX_LOGS: int = 50

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def is_production_like(self) -> bool:
        return (self.ENVIRONMENT or "").strip().lower() in {"production", "prod", "staging"}

    @property
    def session_max_age_seconds(self) -> int:
        return max(int(self.SESSION_MAX_AGE_DAYS), 1) * 24 * 3600

    @property
    def session_cookie_secure(self) -> bool:
        return bool(self.AUTH_COOKIE_SECURE) or self.is_production_like

    def validate_database_configuration(self) -> str:
        url = (self.DATABASE_URL or "").strip()
        if not url:
            raise RuntimeError("Database connection string is not configured. Please set DATABASE_URL.")
        return url

    def validate_security_configuration(self) -> None:
        if not self.is_production_like:
            return

        errors: list[str] = []
        if self.SECRET_KEY == "change-me-in-production":
            errors.append("SECRET_KEY must be changed from the default value")
        if len((self.SECRET_KEY or "").strip()) < 16:
            errors.append("SECRET_KEY must be at least 16 characters")
        if (self.AUTH_COOKIE_SAMESITE or "").strip().lower() == "none" and not self.session_cookie_secure:
            errors.append("AUTH_COOKIE_SAMESITE=none requires a secure cookie")
        if errors:
            joined = "; ".join(errors)
            raise RuntimeError(f"Insecure production configuration: {joined}")


settings = Settings()
