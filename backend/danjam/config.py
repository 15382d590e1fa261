"""Application configuration using pydantic-settings."""

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_PRODUCTION_API_BASE_URL = "https://staysync.org"
_DEVELOPMENT_API_BASE_URL = "http://localhost:3004"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = "Danjam Booking"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"  # development, staging, production

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Hotel backend (REST)
    api_base_url: str = ""
    api_timeout_seconds: float = 10.0
    api_max_retries: int = 3
    api_retry_backoff_seconds: float = 0.5

    # Pricing
    timezone: str = "Asia/Seoul"
    min_stay_nights: int = 1

    # Coupon wallet cache
    wallet_cache_size: int = 1024
    wallet_cache_ttl_seconds: int = 600

    # Reservations
    default_check_in_time: str = "16:00"
    default_check_out_time: str = "11:00"
    reservation_site_name: str = "단잠"

    # Frontend
    frontend_url: str = "http://localhost:3000"
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:8000",
    ]

    @model_validator(mode="after")
    def _resolve_api_base_url(self) -> "Settings":
        """Pick the backend URL for the environment when none is configured."""
        if not self.api_base_url:
            self.api_base_url = (
                _PRODUCTION_API_BASE_URL
                if self.environment == "production"
                else _DEVELOPMENT_API_BASE_URL
            )
        self.api_base_url = self.api_base_url.rstrip("/")
        return self

    @model_validator(mode="after")
    def _ensure_frontend_in_cors(self) -> "Settings":
        """Ensure the configured frontend_url is always in cors_origins."""
        if self.frontend_url and self.frontend_url not in self.cors_origins:
            self.cors_origins.append(self.frontend_url)
        return self

    @model_validator(mode="after")
    def _validate_pricing(self) -> "Settings":
        if self.min_stay_nights < 0:
            raise ValueError("MIN_STAY_NIGHTS must not be negative")
        if self.api_max_retries < 0:
            raise ValueError("API_MAX_RETRIES must not be negative")
        return self


settings = Settings()
