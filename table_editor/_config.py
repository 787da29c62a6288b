import logging
import os

from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    ENVIRONMENT: str
    LOGGING_LEVEL: int = logging.INFO

    # Table rows API configuration
    TABLE_API_BASE_URL: str = "http://localhost:3000/api"
    TABLE_API_TOKEN: str | None = None
    REQUEST_TIMEOUT: float | None = None  # seconds, None waits indefinitely

    # Pagination of the rows listing
    ROWS_PER_PAGE: int = 100

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file_encoding="utf-8",
    )


environment = os.environ.get("ENVIRONMENT", "local")
config = Config(
    ENVIRONMENT=environment,
    # ".env.{environment}" takes priority over ".env"
    _env_file=[".env", f".env.{environment}"],
)
