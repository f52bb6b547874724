"""Load and validate environment variables. Uses python-dotenv.

Callers should build one `ClientConfig` at startup (`ClientConfig.from_env()`)
and hand it to the API client and token store, rather than reading
`os.environ` directly.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from getway_client.utils.logger import get_logger

logger = get_logger()

DEFAULT_API_URL = "http://localhost:3000/api"
# Android emulators reach the host machine through this alias, not localhost.
ANDROID_EMULATOR_API_URL = "http://10.0.2.2:3000/api"
DEFAULT_TIMEOUT_MS = 10000
DEFAULT_CACHE_TTL_MS = 5 * 60 * 1000


def _project_root() -> Path:
    """Resolve project root (the directory holding getway_client/)."""
    return Path(__file__).resolve().parent.parent.parent


def load_config() -> None:
    """
    Load .env from project root. Idempotent; safe to call multiple times.
    Existing environment variables win over .env values.
    """
    load_dotenv(_project_root() / ".env", override=False)


def get_optional(key: str, default: str = "") -> str:
    """Get optional env var; return default if missing or empty."""
    load_config()
    val = os.getenv(key, "").strip()
    return val if val else default


def get_optional_int(key: str, default: int) -> int:
    """Get optional env var as int; return default if missing or invalid."""
    load_config()
    raw = os.getenv(key, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def get_bool(key: str, default: bool = False) -> bool:
    load_config()
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


# --- Public config accessors ---

def platform() -> str:
    """Optional: runtime platform (ios, android, web). Default web."""
    return get_optional("GETWAY_PLATFORM", "web").lower()


def api_base_url_is_set() -> bool:
    return bool(get_optional("GETWAY_API_BASE_URL"))


def api_base_url() -> str:
    """
    Base URL every endpoint is appended to.

    GETWAY_API_BASE_URL wins when set. Otherwise Android emulators get the
    host-loopback alias and every other platform gets localhost.
    """
    explicit = get_optional("GETWAY_API_BASE_URL")
    if explicit:
        return explicit.rstrip("/")
    if platform() == "android":
        return ANDROID_EMULATOR_API_URL
    return DEFAULT_API_URL


def api_timeout_ms() -> int:
    """Optional: request timeout in milliseconds. Default 10000."""
    return get_optional_int("GETWAY_API_TIMEOUT", DEFAULT_TIMEOUT_MS)


def token_storage_key() -> str:
    return get_optional("GETWAY_JWT_STORAGE_KEY", "getway_auth_token")


def user_storage_key() -> str:
    return get_optional("GETWAY_USER_STORAGE_KEY", "getway_user_data")


def refresh_token_storage_key() -> str:
    return get_optional("GETWAY_REFRESH_TOKEN_KEY", "getway_refresh_token")


def storage_path() -> Path:
    """Optional: session file location. Default data/session.json under the project root."""
    raw = get_optional("GETWAY_STORAGE_PATH")
    if raw:
        return Path(raw).expanduser()
    return _project_root() / "data" / "session.json"


def app_environment() -> str:
    return get_optional("GETWAY_APP_ENVIRONMENT", "development").lower()


def debug_mode() -> bool:
    return get_bool("GETWAY_DEBUG_MODE", False)


def log_level() -> str:
    return get_optional("GETWAY_LOG_LEVEL", "INFO").upper()


def log_file() -> Path | None:
    """Optional: also write logs to this file."""
    raw = get_optional("GETWAY_LOG_FILE")
    return Path(raw).expanduser() if raw else None


def cache_ttl_ms() -> int:
    """Optional: lifetime of cached dashboard data in milliseconds. Default 5 minutes."""
    return get_optional_int("GETWAY_CACHE_TTL_MS", DEFAULT_CACHE_TTL_MS)


def project_root() -> Path:
    """Project root directory."""
    return _project_root()


@dataclass(frozen=True)
class ClientConfig:
    """Settings shared by the API client and token store. Built once at startup."""

    api_base_url: str = DEFAULT_API_URL
    api_timeout_ms: int = DEFAULT_TIMEOUT_MS
    token_key: str = "getway_auth_token"
    user_key: str = "getway_user_data"
    refresh_token_key: str = "getway_refresh_token"
    storage_path: Path | None = None
    environment: str = "development"
    debug: bool = False
    base_url_explicit: bool = False
    cache_ttl_ms: int = DEFAULT_CACHE_TTL_MS

    @classmethod
    def from_env(cls) -> "ClientConfig":
        return cls(
            api_base_url=api_base_url(),
            api_timeout_ms=api_timeout_ms(),
            token_key=token_storage_key(),
            user_key=user_storage_key(),
            refresh_token_key=refresh_token_storage_key(),
            storage_path=storage_path(),
            environment=app_environment(),
            debug=debug_mode(),
            base_url_explicit=api_base_url_is_set(),
            cache_ttl_ms=cache_ttl_ms(),
        )

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def storage_keys(self) -> tuple[str, str, str]:
        return (self.token_key, self.user_key, self.refresh_token_key)


def validate_config(config: ClientConfig) -> list[str]:
    """
    Check settings that must be explicit in production.

    Returns:
        Names of missing variables. A warning is logged when any are missing
        and the environment is production.
    """
    missing: list[str] = []
    if not config.base_url_explicit:
        missing.append("GETWAY_API_BASE_URL")
    if missing and config.is_production:
        logger.warning("Missing required environment variables: %s", ", ".join(missing))
    return missing


def log_config(config: ClientConfig) -> None:
    """Log the effective configuration when debug mode is on."""
    if not config.debug:
        return
    logger.info(
        "Client configuration: base_url=%s timeout_ms=%d environment=%s storage=%s",
        config.api_base_url,
        config.api_timeout_ms,
        config.environment,
        config.storage_path,
    )
