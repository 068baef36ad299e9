from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

ALLOWED_GEOLOCATION_PROVIDERS = {"ipapi", "static"}
ALLOWED_RATE_PROVIDERS = {"exchangerate-api", "static"}


class Settings(BaseSettings):
    """Settings loaded from environment with defaults.

    Environment variables use the CURRENCY_LOCALIZER_ prefix (e.g.
    CURRENCY_LOCALIZER_RATES_CACHE_TTL_SECONDS, CURRENCY_LOCALIZER_DATA_DIR).
    """

    model_config = SettingsConfigDict(
        env_prefix="CURRENCY_LOCALIZER_", env_file=".env", case_sensitive=False
    )

    debug: bool = False
    # Library code leaves the root logger alone unless asked to
    configure_logging: bool = False

    # Persistent location cache
    data_dir: Path = Path("data")
    db_filename: str = "currency_localizer.sqlite3"
    db_path: Optional[Path] = None  # derived if not provided
    location_storage_key: str = "currency_localizer.location"
    location_cache_ttl_seconds: int = 86400  # 24 hours

    # In-memory rate cache
    rates_cache_ttl_seconds: int = 3600  # 1 hour

    # Providers
    geolocation_provider: str = "ipapi"
    geolocation_url: str = "https://ipapi.co/json/"
    static_location_currency: str = "USD"
    exchange_rate_provider: str = "exchangerate-api"
    exchange_api_base_url: str = "https://v6.exchangerate-api.com/v6"

    # Transport
    http_timeout_seconds: float = 5.0
    http_retries: int = 1
    http_backoff_seconds: float = 0.5

    def init_post_load(self) -> None:
        """Finalize derived fields and ensure directories exist."""
        if self.db_path is None:
            self.db_path = self.data_dir / self.db_filename
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        if self.geolocation_provider not in ALLOWED_GEOLOCATION_PROVIDERS:
            raise ValueError(
                f"Unsupported geolocation_provider '{self.geolocation_provider}'. "
                f"Allowed: {ALLOWED_GEOLOCATION_PROVIDERS}"
            )
        if self.exchange_rate_provider not in ALLOWED_RATE_PROVIDERS:
            raise ValueError(
                f"Unsupported exchange_rate_provider '{self.exchange_rate_provider}'. "
                f"Allowed: {ALLOWED_RATE_PROVIDERS}"
            )
        if self.location_cache_ttl_seconds <= 0 or self.rates_cache_ttl_seconds <= 0:
            raise ValueError("cache ttl settings must be positive seconds")


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings
