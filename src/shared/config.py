"""Storefront client settings.

Values come from the environment, optionally seeded from a ``.env`` file in
the working directory. Every setting has a default suitable for a backend
running locally on port 8000.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from shared.errors import ConfigError

DEFAULT_API_URL = "http://localhost:8000"
DEFAULT_TIMEOUT = 10.0
DEFAULT_AUTH_HEADER = "token"
DEFAULT_TAX_RATE = 0.10
DEFAULT_PAYMENT_DELAY = 2.0
DEFAULT_STORAGE_PATH = Path.home() / ".storefront" / "session.json"


def _get_env(*keys: str, default: str | None = None) -> str | None:
    for k in keys:
        v = os.getenv(k)
        if v is not None and str(v).strip() != "":
            return v.strip()
    return default


def _get_float(*keys: str, default: float) -> float:
    v = _get_env(*keys, default=None)
    if v is None:
        return default
    try:
        return float(v)
    except ValueError:
        raise ConfigError(f"{keys[0]} must be a number, got {v!r}") from None


@dataclass(frozen=True)
class Settings:
    api_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT
    auth_header: str = DEFAULT_AUTH_HEADER
    tax_rate: float = DEFAULT_TAX_RATE
    payment_delay: float = DEFAULT_PAYMENT_DELAY
    storage_path: Path = DEFAULT_STORAGE_PATH
    log_level: str = "INFO"


def load_settings(env_file: str | os.PathLike | None = None) -> Settings:
    """Build Settings from the environment (and ``env_file`` when given)."""
    load_dotenv(dotenv_path=env_file or find_dotenv(usecwd=True))

    return Settings(
        api_url=(_get_env("STOREFRONT_API_URL", "API_URL", default=DEFAULT_API_URL) or DEFAULT_API_URL).rstrip("/"),
        timeout=_get_float("STOREFRONT_TIMEOUT", default=DEFAULT_TIMEOUT),
        auth_header=_get_env("STOREFRONT_AUTH_HEADER", default=DEFAULT_AUTH_HEADER) or DEFAULT_AUTH_HEADER,
        tax_rate=_get_float("STOREFRONT_TAX_RATE", default=DEFAULT_TAX_RATE),
        payment_delay=_get_float("STOREFRONT_PAYMENT_DELAY", default=DEFAULT_PAYMENT_DELAY),
        storage_path=Path(_get_env("STOREFRONT_STORAGE_PATH", default=str(DEFAULT_STORAGE_PATH))).expanduser(),
        log_level=(_get_env("STOREFRONT_LOG_LEVEL", default="INFO") or "INFO").upper(),
    )
