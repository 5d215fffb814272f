"""Application settings loaded from the environment (and .env when present)."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Course Grades API"
    environment: str = "development"  # development, production

    # Database
    database_url: str = "sqlite:///./grades.db"

    # Auth
    secret_key: str = "change-me-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    # CORS: comma-separated list of origins
    cors_origins: str = "http://localhost:5173"

    # Logging
    log_level: str = "INFO"
    log_dir: str = ""  # empty = console only

    # Rate limiting (slowapi syntax)
    login_rate_limit: str = "10/minute"

    # Grading policy: drop categories with no graded items and re-normalize
    # the remaining weights instead of applying their weight to a 0 average.
    exclude_empty_categories: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def cors_origin_list(self) -> list[str]:
        return [s.strip() for s in self.cors_origins.split(",") if s.strip()]


settings = Settings()
