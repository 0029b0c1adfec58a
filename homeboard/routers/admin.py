"""
Admin router - household admin login.
The token it returns is required by /authorize and /authorize/status.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from homeboard.core.config import Settings
from homeboard.core.security import create_access_token, verify_password
from homeboard.deps import get_settings
from homeboard.schemas.admin import AdminLogin, Token


logger = logging.getLogger("homeboard.routers.admin")

# ---------------------------------------------------------------------------
# ROUTER SETUP
# ---------------------------------------------------------------------------
router = APIRouter(prefix="/admin", tags=["admin"])


# ---------------------------------------------------------------------------
# POST /admin/login - Exchange the admin password for a session token
# ---------------------------------------------------------------------------
@router.post("/login", response_model=Token)
def login(payload: AdminLogin, app_settings: Settings = Depends(get_settings)):
    """
    Authenticate the household admin and return a JWT access token.

    Returns:
        Token: access_token (JWT string) and token_type ("bearer")

    Raises:
        503 Service Unavailable: ADMIN_PASSWORD_HASH is not configured
        401 Unauthorized: Wrong password
    """
    if not app_settings.ADMIN_PASSWORD_HASH:
        logger.error("Admin login attempted but ADMIN_PASSWORD_HASH is not set")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Admin login is not configured. Please set ADMIN_PASSWORD_HASH.",
        )

    if not verify_password(payload.password, app_settings.ADMIN_PASSWORD_HASH):
        logger.warning("Rejected admin login (wrong password)")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    logger.info("Admin logged in")
    return Token(access_token=create_access_token())
