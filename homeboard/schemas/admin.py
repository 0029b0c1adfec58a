"""
Admin schemas - Pydantic models for the admin login request/response.
"""

from pydantic import BaseModel


class AdminLogin(BaseModel):
    """
    Schema for POST /admin/login request body.

    Example request body:
    {
        "password": "household-admin-password"
    }
    """
    password: str


class Token(BaseModel):
    """
    Schema for POST /admin/login response.

    Example response:
    {
        "access_token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
        "token_type": "bearer"
    }

    The admin sends it back as: Authorization: Bearer <access_token>
    """
    access_token: str

    # token_type: Always "bearer" (OAuth 2.0 compatibility)
    token_type: str = "bearer"
