"""Application configuration helpers."""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

SUPPORTED_MODES = {"continuous"}
DEFAULT_OVERPASS_URL = "https://overpass-api.de/api/interpreter"
_PLACEHOLDER_URLS = {"YOUR_RENDER_URL"}


class ConfigError(RuntimeError):
    """Raised when mandatory configuration is missing or malformed."""


@dataclass(frozen=True)
class Settings:
    database_url: str
    port: int = 3001
    import_delay_ms: int = 3000
    import_mode: str = "continuous"
    error_delay_seconds: int = 10
    rate_limit_cooldown_seconds: int = 60
    overpass_url: str = DEFAULT_OVERPASS_URL
    overpass_timeout_seconds: int = 50
    external_url: str = ""
    app_env: str = "development"
    keep_alive_interval_minutes: int = 14
    log_level: str = "INFO"

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def keep_alive_enabled(self) -> bool:
        return self.is_production and bool(self.external_url)


def _get_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load, validate and cache importer settings from the environment."""
    load_dotenv()

    database_url = os.getenv("DATABASE_URL", "")
    if not database_url:
        raise ConfigError("DATABASE_URL must be set in the environment for the importer to run.")

    import_mode = os.getenv("IMPORT_MODE", "continuous").strip().lower() or "continuous"
    if import_mode not in SUPPORTED_MODES:
        raise ConfigError(f"IMPORT_MODE {import_mode!r} is not supported; expected one of {sorted(SUPPORTED_MODES)}")

    external_url = os.getenv("RENDER_EXTERNAL_URL", "").strip().rstrip("/")
    if external_url in _PLACEHOLDER_URLS:
        external_url = ""
    app_env = os.getenv("APP_ENV", "development").strip().lower()

    if not external_url:
        logger.warning("RENDER_EXTERNAL_URL is not configured; keep-alive pings are disabled.")
    if app_env != "production":
        logger.warning("APP_ENV=%s is not production; keep-alive pings are disabled.", app_env)

    return Settings(
        database_url=database_url,
        port=_get_int_env("PORT", 3001),
        import_delay_ms=_get_int_env("IMPORT_DELAY", 3000),
        import_mode=import_mode,
        error_delay_seconds=_get_int_env("IMPORT_ERROR_DELAY", 10),
        rate_limit_cooldown_seconds=_get_int_env("RATE_LIMIT_COOLDOWN", 60),
        overpass_url=os.getenv("OVERPASS_URL", "") or DEFAULT_OVERPASS_URL,
        overpass_timeout_seconds=_get_int_env("OVERPASS_TIMEOUT", 50),
        external_url=external_url,
        app_env=app_env,
        keep_alive_interval_minutes=_get_int_env("KEEP_ALIVE_INTERVAL_MINUTES", 14),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
