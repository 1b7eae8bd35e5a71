"""
FastAPI app assembly: logging, middleware and router wiring.
"""
import logging
import os

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.requests import Request

from admin_panel.api.tables import router as tables_router
from admin_panel.api.users import router as users_router
from admin_panel.utils.locale import negotiate_locale, reset_locale, set_locale
from admin_panel.utils.runtime import dev_mode_active

# Configure logging
LOG_LEVEL_NAME = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_LEVEL = getattr(logging, LOG_LEVEL_NAME, logging.INFO)
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)
logger.setLevel(LOG_LEVEL)
logger.info("app_startup: log_level=%s", LOG_LEVEL_NAME)

# Database schema is managed by Alembic migrations.

app = FastAPI(
    title="Admin Panel",
    description="User administration and generic searchable, sortable data tables.",
    version="1.0.0",
)

# Avoid implicit trailing-slash redirects for predictable URLs
app.router.redirect_slashes = False

origins = [
    "http://localhost",
    "http://localhost:3000",
    "http://localhost:8000",
]
extra_origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins + extra_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Middleware: bind the request locale for accessors and date formatting
@app.middleware("http")
async def bind_request_locale(request: Request, call_next):
    h = request.headers
    locale = negotiate_locale(h.get("x-locale"), h.get("accept-language"))
    token = set_locale(locale)
    try:
        response = await call_next(request)
    finally:
        reset_locale(token)
    if locale:
        response.headers["Content-Language"] = locale
    return response


admin_router = APIRouter(prefix="/admin")
admin_router.include_router(users_router)
admin_router.include_router(tables_router)

app.include_router(admin_router)

if dev_mode_active():
    logger.warning("DEV_MODE active: every request is served as the local administrator")


@app.get("/health")
def health_check():
    return {"status": "ok", "service": "admin-panel"}
