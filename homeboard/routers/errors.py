"""
Calendar error → JSON response mapping shared by the calendar routers.

Every error body has the same shape so the dashboard can render it inline:

    {"error": "...", "events": [], "reauthorize": false}

reauthorize comes from the exception's requires_reauthorization flag.
"""

import logging
from typing import Optional

from fastapi import status
from fastapi.responses import JSONResponse

from homeboard.environments.base import (
    CalendarIntegrationError,
    ConfigurationError,
    CredentialStoreError,
    NetworkError,
    NoCredentialError,
    ProviderError,
    TokenExchangeError,
    TokenRefreshError,
)
from homeboard.schemas.calendar import CalendarErrorResponse


logger = logging.getLogger("homeboard.routers.errors")

# First match wins
ERROR_STATUS_CODES = [
    (ConfigurationError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (NoCredentialError, status.HTTP_401_UNAUTHORIZED),
    (TokenRefreshError, status.HTTP_401_UNAUTHORIZED),
    (TokenExchangeError, status.HTTP_401_UNAUTHORIZED),
    (ProviderError, status.HTTP_502_BAD_GATEWAY),
    (NetworkError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (CredentialStoreError, status.HTTP_503_SERVICE_UNAVAILABLE),
]


def status_for(error: CalendarIntegrationError) -> int:
    for error_cls, status_code in ERROR_STATUS_CODES:
        if isinstance(error, error_cls):
            return status_code
    return status.HTTP_400_BAD_REQUEST


def error_response(message: str, status_code: int, reauthorize: bool = False) -> JSONResponse:
    """Build the standard error body for a failure that is not an exception."""
    body = CalendarErrorResponse(error=message, reauthorize=reauthorize)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def calendar_error_response(error: CalendarIntegrationError, status_code: Optional[int] = None) -> JSONResponse:
    """
    Convert a calendar exception into its JSON error response.

    ConfigurationError bodies also list the missing keys so the operator
    sees everything to fix at once.
    """
    status_code = status_code or status_for(error)
    body = CalendarErrorResponse(
        error=str(error),
        reauthorize=error.requires_reauthorization,
        missing=error.missing if isinstance(error, ConfigurationError) else None,
    )
    logger.warning(f"Calendar request failed ({status_code}): {error}")
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))
