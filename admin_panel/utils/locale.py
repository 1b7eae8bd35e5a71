"""Request-scoped locale handling.

The active locale lives in a ContextVar so that ORM accessors (e.g.
``Country.name``) and the table presentation layer can resolve it without a
request object. The API middleware sets it per request; outside a request the
configured ``APP_LOCALE`` applies.
"""
from contextvars import ContextVar, Token
from typing import Optional

from admin_panel.utils.settings import get_settings

_current_locale: ContextVar[Optional[str]] = ContextVar("admin_panel_locale", default=None)


def get_locale() -> str:
    """Return the locale of the current context or the configured default."""
    return _current_locale.get() or get_settings().locale


def set_locale(locale: Optional[str]) -> Token:
    """Set the locale for the current context; returns a token for ``reset_locale``."""
    return _current_locale.set(locale.lower() if locale else None)


def reset_locale(token: Token) -> None:
    _current_locale.reset(token)


def negotiate_locale(x_locale: Optional[str], accept_language: Optional[str]) -> Optional[str]:
    """Pick a supported locale from an explicit header or Accept-Language.

    Accept-Language entries are tried in the order given; quality weights are
    ignored and region subtags are stripped (``es-MX`` -> ``es``).
    """
    supported = get_settings().supported_locales
    candidates = []
    if x_locale:
        candidates.append(x_locale)
    if accept_language:
        candidates.extend(part.split(";")[0] for part in accept_language.split(","))
    for candidate in candidates:
        lang = candidate.strip().lower().replace("_", "-").split("-")[0]
        if lang in supported:
            return lang
    return None
