"""Application settings sourced from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple


@dataclass(frozen=True)
class AppSettings:
    locale: str
    supported_locales: Tuple[str, ...]
    table_per_page: int
    table_max_per_page: int
    log_level: str


def _normalize_int(value: str | None, default: int, *, minimum: int = 1) -> int:
    """Return a positive integer from an environment-style value."""
    if value is None or not value.strip():
        return default
    try:
        parsed = int(value.strip())
    except ValueError:
        return default
    return parsed if parsed >= minimum else default


def _normalize_locales(value: str | None, default_locale: str) -> Tuple[str, ...]:
    raw = value if value is not None else "en,es"
    locales = [entry.strip().lower() for entry in raw.split(",") if entry.strip()]
    if default_locale not in locales:
        locales.insert(0, default_locale)
    return tuple(dict.fromkeys(locales))


@lru_cache(maxsize=None)
def get_settings() -> AppSettings:
    """Return the cached settings derived from the environment."""
    locale = (os.getenv("APP_LOCALE") or "en").strip().lower()
    per_page = _normalize_int(os.getenv("DATATABLE_PER_PAGE"), 15)
    max_per_page = _normalize_int(os.getenv("DATATABLE_MAX_PER_PAGE"), 100)
    return AppSettings(
        locale=locale,
        supported_locales=_normalize_locales(os.getenv("APP_SUPPORTED_LOCALES"), locale),
        table_per_page=per_page,
        table_max_per_page=max(max_per_page, per_page),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )


def refresh_settings() -> None:
    """Invalidate cached settings (useful for tests)."""
    get_settings.cache_clear()
