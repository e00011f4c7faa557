"""Configuration management for the admin console."""

import os
import logging
from typing import List, Optional

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class AdminConfig:
    """Runtime settings read from the environment."""

    def __init__(
        self,
        database_url: Optional[str] = None,
        database_name: Optional[str] = None,
        cars_collection: str = "cars",
        adds_collection: str = "adds",
        car_tariffs: bool = True,
        cors_origins: Optional[List[str]] = None,
        log_level: str = "INFO",
        port: int = 8000,
    ):
        self.database_url = database_url
        self.database_name = database_name
        self.cars_collection = cars_collection
        self.adds_collection = adds_collection
        self.car_tariffs = car_tariffs
        self.cors_origins = cors_origins or ["*"]
        self.log_level = log_level
        self.port = port

    @property
    def database_configured(self) -> bool:
        return bool(self.database_url and self.database_name)


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    logger.warning("Ignoring unrecognised value %r for %s", raw, name)
    return default


def load_config() -> AdminConfig:
    """
    Load configuration from environment variables.
    Without DATABASE_URL and DATABASE_NAME the console runs against an in-memory store.
    """
    origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

    try:
        port = int(os.getenv("PORT", "8000"))
    except ValueError:
        logger.warning("Invalid PORT value, falling back to 8000")
        port = 8000

    return AdminConfig(
        database_url=os.getenv("DATABASE_URL", "").strip() or None,
        database_name=os.getenv("DATABASE_NAME", "").strip() or None,
        cars_collection=os.getenv("CARS_COLLECTION", "cars").strip() or "cars",
        adds_collection=os.getenv("ADDS_COLLECTION", "adds").strip() or "adds",
        car_tariffs=_env_flag("CAR_TARIFFS", True),
        cors_origins=origins,
        log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO",
        port=port,
    )
