"""
Application Configuration
Loads settings from OLX_* environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings
from pathlib import Path


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_name: str = "OLX Search"
    app_version: str = "1.0.0"

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Browser Configuration
    headless: bool = True
    page_timeout_ms: int = 30000
    user_agent: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36"
    )

    # Scraper Configuration
    scraper_max_retries: int = 3
    retry_base_delay: float = 1.0   # seconds
    retry_max_delay: float = 10.0   # seconds

    # Logging Configuration
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    log_to_file: bool = False

    # Paths
    @property
    def log_dir(self) -> Path:
        """Get the log directory path."""
        return Path(__file__).parent.parent.parent / "logs"

    @property
    def log_file(self) -> Path:
        """Get the log file path."""
        return self.log_dir / "olx-search.log"

    def scraper_options(self) -> dict:
        """Keyword arguments for every OlxScraper the server creates."""
        return {
            'timeout_ms': self.page_timeout_ms,
            'max_retries': self.scraper_max_retries,
            'retry_base_delay': self.retry_base_delay,
            'retry_max_delay': self.retry_max_delay,
            'user_agent': self.user_agent,
        }

    class Config:
        env_prefix = "OLX_"
        # Only load .env if it exists to avoid permission errors
        env_file = ".env" if Path(".env").exists() else None
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"  # Ignore extra environment variables


# Global settings instance
settings = Settings()
