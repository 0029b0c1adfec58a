"""
Main application entry point - FastAPI app instance and configuration.
Run with: uvicorn homeboard.main:app --reload
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from homeboard.core.config import settings
from homeboard.core.logging import setup_logging
from homeboard.routers import admin, calendar_auth, calendar_events
from homeboard.services.token_manager import AccessTokenCache

# ---------------------------------------------------------------------------
# LOGGING
# ---------------------------------------------------------------------------
logger = setup_logging(settings.LOG_LEVEL)

# ---------------------------------------------------------------------------
# CREATE FASTAPI APPLICATION
# ---------------------------------------------------------------------------
app = FastAPI(
    title=settings.APP_NAME,
    docs_url="/docs",
    redoc_url="/redoc",
)

# One access token cache per process, shared by every request's TokenLifecycleManager
app.state.token_cache = AccessTokenCache()

# ---------------------------------------------------------------------------
# CORS MIDDLEWARE
# ---------------------------------------------------------------------------
# The dashboard may be served from a different origin than the API
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# REGISTER ROUTERS
# ---------------------------------------------------------------------------
# admin.router: /admin/login
# calendar_auth.router: /authorize, /authorize/status, /callback
# calendar_events.router: /events, /events/week, /events/month
app.include_router(admin.router)
app.include_router(calendar_auth.router)
app.include_router(calendar_events.router)


# ---------------------------------------------------------------------------
# HEALTH CHECK ENDPOINT
# ---------------------------------------------------------------------------
@app.get("/health", tags=["health"])
def health_check():
    """
    Liveness probe. Does not touch the database or Google.

    Returns:
        {"status": "ok"}
    """
    return {"status": "ok"}
