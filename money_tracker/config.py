"""Configuration management"""

from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_DIR = Path(__file__).resolve().parent


class Settings(BaseSettings):
    """Application settings"""

    # Application
    app_name: str = "Money Tracker"
    debug: bool = False
    log_level: str = "INFO"

    # Static front-end server
    static_dir: Path = PACKAGE_DIR / "frontend"
    index_file: str = "index.html"
    login_file: str = "login.html"
    login_path: str = "/login"
    host: str = "127.0.0.1"
    port: int = 3000

    # Backend API
    api_base_url: Optional[str] = None
    local_api_url: str = "http://localhost:8080"
    hosted_api_url: str = "https://track-transaction.onrender.com"
    use_local_api: bool = True

    # HTTP client behaviour
    request_timeout_seconds: float = 10.0
    max_retries: int = 3
    retry_backoff_seconds: float = 0.5
    token_expiry_leeway_seconds: int = 0

    # Display
    currency_symbol: str = "₹"

    # Session persistence for the command line front-end
    session_file: Path = Path.home() / ".money_tracker" / "session.json"

    # CORS
    allowed_origins: List[str] = []

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore"
    )

    @field_validator("api_base_url", "local_api_url", "hosted_api_url")
    @classmethod
    def validate_url(cls, v: Optional[str]) -> Optional[str]:
        """Validate API URLs use http or https"""
        if v is None:
            return v
        if not v.startswith(("http://", "https://")):
            raise ValueError("API URLs must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("max_retries")
    @classmethod
    def validate_max_retries(cls, v: int) -> int:
        """Validate retry count is not negative"""
        if v < 0:
            raise ValueError("MAX_RETRIES must not be negative")
        return v

    @property
    def resolved_api_url(self) -> str:
        """Base URL of the REST backend, explicit setting first"""
        if self.api_base_url:
            return self.api_base_url
        return self.local_api_url if self.use_local_api else self.hosted_api_url


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
