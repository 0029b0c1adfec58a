"""
Calendar Auth Router - one-time Google consent for the household calendar.

Endpoints:
==========
- GET /authorize         → {"authUrl": ...} (admin only)
- GET /authorize/status  → where the stored credential is in its lifecycle (admin only)
- GET /callback          → Google's redirect target; HTML success / error page

OAuth Flow:
===========
1. Admin logs in (POST /admin/login) and calls GET /authorize
2. Admin opens authUrl and grants read-only calendar access
3. Google redirects the browser to /callback?code=...
4. Backend exchanges the code and stores the credential
5. From then on the dashboard reads events without any login

/callback is unauthenticated: Google's redirect carries no application
credentials. Nothing is stored unless Google accepts the code.
"""

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import HTMLResponse

from homeboard.deps import (
    get_authorization_controller,
    get_token_manager,
    require_admin,
)
from homeboard.environments.base import (
    AuthorizationDeniedError,
    CalendarIntegrationError,
    ConfigurationError,
    CredentialStoreError,
    MissingCodeError,
    NetworkError,
    ProviderError,
    TokenExchangeError,
)
from homeboard.routers.errors import calendar_error_response
from homeboard.schemas.calendar import AuthorizationStatus, AuthorizeResponse
from homeboard.services.authorization import AuthorizationFlowController
from homeboard.services.callback_pages import CallbackPageRenderer
from homeboard.services.token_manager import TokenLifecycleManager, TokenState


logger = logging.getLogger("homeboard.routers.calendar_auth")


# ---------------------------------------------------------------------------
# ROUTER SETUP
# ---------------------------------------------------------------------------
router = APIRouter(tags=["calendar-auth"])

# Callback failure → (HTTP status, page title)
CALLBACK_ERRORS = [
    (MissingCodeError, status.HTTP_400_BAD_REQUEST, "Authorization Failed"),
    (AuthorizationDeniedError, status.HTTP_400_BAD_REQUEST, "Authorization Denied"),
    (TokenExchangeError, status.HTTP_400_BAD_REQUEST, "Authorization Failed"),
    (ConfigurationError, status.HTTP_500_INTERNAL_SERVER_ERROR, "Calendar Not Configured"),
    (ProviderError, status.HTTP_502_BAD_GATEWAY, "Google Unavailable"),
    (NetworkError, status.HTTP_503_SERVICE_UNAVAILABLE, "Google Unreachable"),
    (CredentialStoreError, status.HTTP_503_SERVICE_UNAVAILABLE, "Storage Unavailable"),
]


# ---------------------------------------------------------------------------
# ENDPOINTS
# ---------------------------------------------------------------------------


@router.get("/authorize", response_model=AuthorizeResponse, response_model_by_alias=True)
async def authorize(
    _admin: str = Depends(require_admin),
    controller: AuthorizationFlowController = Depends(get_authorization_controller),
):
    """
    Get the Google consent URL.

    Returns:
        {"authUrl": "https://accounts.google.com/o/oauth2/v2/auth?..."}

    Raises:
        401: Missing or invalid admin token
        500: GOOGLE_CLIENT_ID or GOOGLE_REDIRECT_URI not configured
    """
    try:
        auth_url = controller.begin_authorization()
    except CalendarIntegrationError as e:
        return calendar_error_response(e)

    return AuthorizeResponse(auth_url=auth_url)


@router.get("/authorize/status", response_model=AuthorizationStatus)
async def authorization_status(
    _admin: str = Depends(require_admin),
    token_manager: TokenLifecycleManager = Depends(get_token_manager),
):
    """
    Report whether the calendar is connected.

    Returns:
        state: uninitialized | active | expired | invalid
        connected: True unless nothing is stored or the refresh token was rejected
        expires_at: Access token expiry, when a credential exists
    """
    try:
        state = token_manager.state()
        credential = token_manager.store.get() if state != TokenState.UNINITIALIZED else None
    except CalendarIntegrationError as e:
        return calendar_error_response(e)

    return AuthorizationStatus(
        state=state,
        connected=state in (TokenState.ACTIVE, TokenState.EXPIRED),
        expires_at=credential.expires_at if credential else None,
    )


@router.get("/callback", response_class=HTMLResponse)
async def callback(
    request: Request,
    controller: AuthorizationFlowController = Depends(get_authorization_controller),
):
    """
    Handle Google's OAuth redirect.

    Query params (from Google):
        code: Authorization code (on consent)
        error / error_description: Set instead of code when consent failed

    Returns:
        200 success page, or an error page with the status from CALLBACK_ERRORS
    """
    renderer = CallbackPageRenderer()

    try:
        outcome = await controller.handle_callback(request.query_params)
    except CalendarIntegrationError as e:
        for error_cls, status_code, title in CALLBACK_ERRORS:
            if isinstance(e, error_cls):
                break
        else:
            status_code, title = status.HTTP_400_BAD_REQUEST, "Authorization Failed"

        logger.warning(f"OAuth callback failed ({status_code}): {e}")
        html = renderer.render_error(
            error_message=str(e),
            title=title,
            hint="Start again from the Authorize button on the dashboard.",
        )
        return HTMLResponse(content=html, status_code=status_code)

    return HTMLResponse(content=renderer.render_success(outcome))
