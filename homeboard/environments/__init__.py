"""
Environments Module - External Service Integrations

Architecture Overview:
======================
environments/
├── __init__.py           # Module exports
├── base.py               # Provider contract + calendar error taxonomy
└── google/               # Google OAuth + Calendar
    ├── auth/
    └── calendar/
"""

from homeboard.environments.base import (
    EnvironmentProvider,
    OAuthTokens,
    CalendarIntegrationError,
    ConfigurationError,
    MissingCodeError,
    AuthorizationDeniedError,
    TokenExchangeError,
    TokenRefreshError,
    NoCredentialError,
    ProviderError,
    NetworkError,
    CredentialStoreError,
)

__all__ = [
    "EnvironmentProvider",
    "OAuthTokens",
    "CalendarIntegrationError",
    "ConfigurationError",
    "MissingCodeError",
    "AuthorizationDeniedError",
    "TokenExchangeError",
    "TokenRefreshError",
    "NoCredentialError",
    "ProviderError",
    "NetworkError",
    "CredentialStoreError",
]
