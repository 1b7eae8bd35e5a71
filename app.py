"""
App assembly entry point.

Re-exports the FastAPI `app` from `admin_panel.api.main` so servers can be
pointed at `app:app`.
"""

from admin_panel.api.main import app  # noqa: F401
