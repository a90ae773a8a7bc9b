from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv

from spotify_relay.core.errors import ConfigurationError

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]
SameSite = Literal["strict", "lax", "none"]

DEFAULT_CORS_ORIGIN = "https://spotcalendar.vercel.app"
DEFAULT_TOKEN_URL = "https://accounts.spotify.com/api/token"
DEFAULT_API_BASE_URL = "https://api.spotify.com/v1"

_REQUIRED_CREDENTIALS = ("SPOTIFY_CLIENT_ID", "SPOTIFY_CLIENT_SECRET", "REDIRECT_URI")


def _getenv(name: str, default: str) -> str:
    # Centralize env access so it's easy to extend later (type casting, required vars)
    return os.environ.get(name, default).strip()


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    raise ConfigurationError(f"{name} must be a boolean (got {raw!r})")


@dataclass(frozen=True)
class Settings:
    client_id: str
    client_secret: str
    redirect_uri: str
    app_env: AppEnv = "dev"
    log_level: LogLevel = "info"
    log_json: bool = False
    port: int = 3000
    cors_origin: str = DEFAULT_CORS_ORIGIN
    cookie_secure: bool = False
    cookie_samesite: SameSite = "strict"
    token_url: str = DEFAULT_TOKEN_URL
    api_base_url: str = DEFAULT_API_BASE_URL
    upstream_timeout: float = 10.0
    metrics_enabled: bool = True

    def __post_init__(self) -> None:
        # A SameSite=None cookie without Secure is silently dropped by browsers.
        if self.cookie_samesite == "none" and not self.cookie_secure:
            raise ConfigurationError(
                "COOKIE_SAMESITE=none requires COOKIE_SECURE=true"
            )

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def is_test(self) -> bool:
        return self.app_env == "test"

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"


def load_env_file(app_env: str, directory: Path | None = None) -> bool:
    """Load ``.env.<app_env>`` from *directory* (default: cwd) if present.

    Variables already set in the process environment win.
    """
    env_file = (directory or Path.cwd()) / f".env.{app_env}"
    if not env_file.is_file():
        return False
    return load_dotenv(env_file, override=False)


def load_settings() -> Settings:
    """Read the process environment once and build the immutable Settings.

    Raises ConfigurationError when an OAuth credential is missing or a
    value cannot be parsed.  Callers must not catch it: a relay without
    credentials must never come up.
    """
    app_env_raw = _getenv("APP_ENV", "dev").lower()
    if app_env_raw not in ("dev", "test", "prod"):
        raise ConfigurationError(
            f"APP_ENV must be dev|test|prod (got {app_env_raw!r})"
        )

    load_env_file(app_env_raw)

    missing = [name for name in _REQUIRED_CREDENTIALS if not _getenv(name, "")]
    if missing:
        raise ConfigurationError(
            f"Missing required environment variable(s): {', '.join(missing)}"
        )

    log_level_raw = _getenv("LOG_LEVEL", "info").lower()
    if log_level_raw not in ("debug", "info", "warning", "error"):
        raise ConfigurationError(
            f"LOG_LEVEL must be debug|info|warning|error (got {log_level_raw!r})"
        )

    port_raw = _getenv("PORT", "3000")
    try:
        port = int(port_raw)
    except ValueError:
        raise ConfigurationError(f"PORT must be an integer (got {port_raw!r})") from None

    timeout_raw = _getenv("UPSTREAM_TIMEOUT", "10")
    try:
        upstream_timeout = float(timeout_raw)
    except ValueError:
        raise ConfigurationError(
            f"UPSTREAM_TIMEOUT must be a number of seconds (got {timeout_raw!r})"
        ) from None

    samesite_raw = _getenv("COOKIE_SAMESITE", "strict").lower()
    if samesite_raw not in ("strict", "lax", "none"):
        raise ConfigurationError(
            f"COOKIE_SAMESITE must be strict|lax|none (got {samesite_raw!r})"
        )

    secure_raw = _getenv("COOKIE_SECURE", "")
    if secure_raw:
        cookie_secure = _parse_bool("COOKIE_SECURE", secure_raw)
    else:
        cookie_secure = app_env_raw == "prod"

    return Settings(  # type: ignore[arg-type]
        client_id=_getenv("SPOTIFY_CLIENT_ID", ""),
        client_secret=_getenv("SPOTIFY_CLIENT_SECRET", ""),
        redirect_uri=_getenv("REDIRECT_URI", ""),
        app_env=app_env_raw,
        log_level=log_level_raw,
        log_json=_parse_bool("LOG_JSON", _getenv("LOG_JSON", "") or "false"),
        port=port,
        cors_origin=_getenv("CORS_ORIGIN", DEFAULT_CORS_ORIGIN),
        cookie_secure=cookie_secure,
        cookie_samesite=samesite_raw,
        token_url=_getenv("SPOTIFY_TOKEN_URL", DEFAULT_TOKEN_URL),
        api_base_url=_getenv("SPOTIFY_API_BASE_URL", DEFAULT_API_BASE_URL).rstrip("/"),
        upstream_timeout=upstream_timeout,
        metrics_enabled=_parse_bool(
            "METRICS_ENABLED", _getenv("METRICS_ENABLED", "") or "true"
        ),
    )
