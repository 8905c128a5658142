"""Runtime settings, loaded from the environment and an optional .env file."""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigError

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """SiteGrade settings.

    Every field can be set with a ``SITE_GRADE_`` prefixed environment
    variable, e.g. ``SITE_GRADE_PAGESPEED_API_KEY``.
    """

    model_config = SettingsConfigDict(
        env_prefix="SITE_GRADE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # External services (all optional; a missing key skips that collaborator)
    pagespeed_api_key: Optional[str] = None
    openrouter_api_key: Optional[str] = None
    openrouter_model: str = "minimax/minimax-m2.5"
    google_places_api_key: Optional[str] = None

    # Stats view shared secret
    stats_token: Optional[str] = None

    # Report storage
    report_dir: Path = Field(default=Path.home() / ".site-grade" / "reports")
    report_ttl_days: int = Field(default=30, ge=1)

    # Timeouts (seconds)
    fetch_timeout: float = Field(default=30.0, gt=0)
    pagespeed_timeout: float = Field(default=60.0, gt=0)
    ai_timeout: float = Field(default=25.0, gt=0)
    places_timeout: float = Field(default=10.0, gt=0)

    user_agent: str = "SiteGrader/1.0 (+https://sitegrade.pro) Mozilla/5.0 (compatible)"

    @field_validator("pagespeed_api_key", "openrouter_api_key", "google_places_api_key", "stats_token")
    @classmethod
    def blank_is_unset(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v

    @property
    def report_ttl_seconds(self) -> int:
        return self.report_ttl_days * 24 * 60 * 60


@lru_cache()
def get_settings() -> Settings:
    try:
        settings = Settings()
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {e}") from e
    if not settings.pagespeed_api_key:
        logger.debug("No PageSpeed API key set; using the unauthenticated quota")
    return settings
