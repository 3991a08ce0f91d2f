"""Application configuration."""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="DOCFLOW_",
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # App
    APP_NAME: str = "DocFlow Console"
    ENV: str = "development"
    DEBUG: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"

    # Demo data loaded into a fresh console (documents, tasks, notifications)
    SEED_DEMO_DATA: bool = True

    # Simulated search latency; 0 resolves on the next loop iteration.
    SEARCH_LATENCY_SECONDS: float = 0.0

    # Tasks
    DEFAULT_TASK_ASSIGNER: str = "Current User"

    # Departments offered by the filter controls
    DEPARTMENTS: str = "Engineering,HR,Finance,Legal,Safety,Procurement,Operations"

    # Activity feed
    RECENT_ACTIVITY_LIMIT: int = 20

    @property
    def departments_list(self) -> list[str]:
        """Get departments as list."""
        return [name.strip() for name in self.DEPARTMENTS.split(",") if name.strip()]


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
