"""Configuration settings for the application."""
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from filing_insights.services.exceptions import ConfigurationError

BASE_DIR = Path(__file__).resolve().parent
ROOT_DIR = BASE_DIR.parent.parent

DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

DEFAULT_USER_AGENT = "UK-Company-Insights/1.0"


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=str((ROOT_DIR / ".env").resolve()),
        case_sensitive=False,
        extra="ignore",
    )

    # Companies House document API
    companies_house_api_key: str = ""
    user_agent: str = DEFAULT_USER_AGENT

    # Gemini AI configuration
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"
    gemini_max_output_tokens: int = Field(
        default=1000,
        ge=100,
        le=8192,
        description="Upper bound on tokens generated per filing analysis",
    )
    gemini_temperature: float = Field(
        default=0.2,
        ge=0.0,
        le=1.0,
        description="Sampling temperature; kept low for consistent financial output",
    )
    gemini_request_timeout: Optional[float] = Field(
        default=None,
        description="Seconds before a Gemini call is abandoned; None keeps the transport default",
    )

    # Client-side result cache
    cache_path: str = str(ROOT_DIR / "data" / "summary_cache.json")
    cache_expiry_days: int = Field(default=30, ge=1)

    # CORS configuration
    cors_origins: List[str] = Field(default_factory=lambda: DEFAULT_CORS_ORIGINS.copy())
    cors_allow_all: bool = Field(default=False)

    # API configuration
    api_version: str = "v1"
    debug: bool = False

    # Server binding for the `filing-insights` command
    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)
    reload: bool = False

    def missing_credentials(self) -> List[str]:
        missing = []
        if not self.companies_house_api_key:
            missing.append("COMPANIES_HOUSE_API_KEY")
        if not self.gemini_api_key:
            missing.append("GEMINI_API_KEY")
        return missing

    def require_credentials(self) -> None:
        """Fail fast when the deployment cannot reach its upstream services."""
        missing = self.missing_credentials()
        if missing:
            raise ConfigurationError(
                f"Missing required configuration: {', '.join(missing)}"
            )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
