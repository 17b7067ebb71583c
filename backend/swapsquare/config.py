"""Application Configuration: environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache): single instance per process
    - Marketplace limits default to the values in core/domain_types.py

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

from swapsquare.core.domain_types import (
    DEFAULT_CITY, MAX_IMAGE_BYTES, MAX_IMAGES_PER_ITEM, MAX_LIVE_ITEMS_PER_OWNER,
)


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://swapsquare:swapsquare@db:5432/swapsquare"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting providers hand out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Persistent Store retry on transient failure
    store_max_retries: int = 3
    store_base_delay_ms: int = 100
    store_max_delay_ms: int = 2_000

    # Marketplace rules
    max_live_items_per_owner: int = MAX_LIVE_ITEMS_PER_OWNER
    max_images_per_item: int = MAX_IMAGES_PER_ITEM
    max_image_bytes: int = MAX_IMAGE_BYTES
    default_city: str = DEFAULT_CITY

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
