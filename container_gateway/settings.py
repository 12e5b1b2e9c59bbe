import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

load_dotenv()


class Settings(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Upstream Configuration
    ads_base_url: str = Field(
        default="http://ads.rocket-stream.bottlerocketservices.com/advertisements",
        alias="ADS_BASE_URL",
    )
    images_base_url: str = Field(
        default="http://images.rocket-stream.bottlerocketservices.com/images",
        alias="IMAGES_BASE_URL",
    )
    videos_base_url: str = Field(
        default="http://videos.rocket-stream.bottlerocketservices.com/videos",
        alias="VIDEOS_BASE_URL",
    )
    request_timeout: float = Field(default=30.0, alias="REQUEST_TIMEOUT")

    # Retry Configuration
    max_attempts: int = Field(default=10, ge=1, alias="MAX_ATTEMPTS")
    max_backoff_ms: int = Field(default=1_000, ge=0, alias="MAX_BACKOFF_MS")
    backoff_jitter_ms: int = Field(default=100, ge=0, alias="BACKOFF_JITTER_MS")

    # Cache Configuration
    cache_capacity: int = Field(default=100, ge=1, alias="CACHE_CAPACITY")
    asset_concurrency: int = Field(default=8, ge=1, alias="ASSET_CONCURRENCY")

    # Logging Configuration
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_file: str = Field(default="log/application.log", alias="LOG_FILE")

    # Server Configuration
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=8000, alias="PORT")


def load_settings() -> Settings:
    """Build settings from the process environment (after .env is loaded)."""
    return Settings.model_validate(dict(os.environ))
