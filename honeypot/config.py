# honeypot/config.py

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class Settings(BaseSettings):
    PROJECT_NAME: str = "Honeypot Detection"

    # ── Environment mode  (development | production) ──
    APP_ENV: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # ── Attempt counter (brute force tracking) ──
    REDIS_URL: Optional[str] = None
    BRUTE_FORCE_WINDOW_SECONDS: int = 300
    BRUTE_FORCE_ATTEMPT_THRESHOLD: int = 3
    BRUTE_FORCE_KEY_PREFIX: str = "honeypot:login_attempts:"

    # ── Matching limits ──
    MAX_TARGET_LENGTH: int = 16384
    COMMENT_MAX_LENGTH: int = 255

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @property
    def is_production(self) -> bool:
        return self.APP_ENV.lower().strip() == "production"


@lru_cache
def get_settings() -> Settings:
    return Settings()


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Apply the process-wide logging format and level."""
    settings = settings or get_settings()
    level = logging.DEBUG if settings.DEBUG else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logger.debug("Logging configured at %s", logging.getLevelName(level))
