"""
Application settings and configuration
"""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Server Configuration
    HOST: str = Field(default="0.0.0.0", description="Server host")
    PORT: int = Field(default=8080, description="Server port")
    DEBUG: bool = Field(default=False, description="Debug mode")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    APP_NAME: str = Field(default="Zapat", description="Name shown in page titles")

    # Data Configuration
    DATA_DIR: Path = Field(
        default=Path("./data"), description="Directory holding the activity feeds"
    )
    EVENTS_FILE: str = Field(
        default="github-events.jsonl", description="GitHub event feed file name"
    )
    METRICS_FILE: str = Field(
        default="metrics.jsonl", description="Pipeline job metrics feed file name"
    )
    EVENT_TYPES_FILE: Optional[Path] = Field(
        default=None, description="Optional JSON file overriding event labels"
    )

    # Query Configuration
    DEFAULT_DAYS: int = Field(default=7, description="Default lookback window in days")

    # Dashboard Configuration
    REFRESH_INTERVAL: float = Field(
        default=30.0, description="Seconds between dashboard poll cycles"
    )
    MAX_METRICS_DISPLAY: int = Field(
        default=50, description="Maximum metric rows shown in the jobs table"
    )
    GITHUB_WEB_URL: str = Field(
        default="https://github.com", description="Base URL for repository links"
    )
    DASHBOARD_API_URL: str = Field(
        default="http://localhost:8080", description="API base URL used by watchers"
    )
    POLL_TIMEOUT: float = Field(default=10.0, description="Poll request timeout in seconds")

    @property
    def events_path(self) -> Path:
        """Full path of the GitHub event feed"""
        return self.DATA_DIR / self.EVENTS_FILE

    @property
    def metrics_path(self) -> Path:
        """Full path of the metrics feed"""
        return self.DATA_DIR / self.METRICS_FILE

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


# Global settings instance
settings = Settings()
