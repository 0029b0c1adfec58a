"""
Security utilities - admin password verification and session JWTs.

The household has one admin (whoever runs the one-time calendar
authorization). There are no user accounts: the admin password is kept
as a bcrypt hash in ADMIN_PASSWORD_HASH and a successful login yields a
short-lived JWT with the fixed subject "admin".
"""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt  # python-jose library for JWT encoding/decoding
from passlib.context import CryptContext  # Password hashing library

from homeboard.core.config import settings

# Subject claim carried by every admin session token
ADMIN_SUBJECT = "admin"

# ---------------------------------------------------------------------------
# PASSWORD HASHING
# ---------------------------------------------------------------------------
# bcrypt is slow on purpose (brute-force resistant) and salts every hash
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """
    Hash a plaintext password using bcrypt.

    Used to produce the value for ADMIN_PASSWORD_HASH.
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plaintext password against a stored bcrypt hash.

    Returns False (instead of raising) for an empty or malformed hash so a
    misconfigured deployment simply refuses every login.
    """
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        return False


# ---------------------------------------------------------------------------
# ADMIN SESSION TOKENS
# ---------------------------------------------------------------------------


def create_access_token(subject: str = ADMIN_SUBJECT, expires_delta: timedelta | None = None) -> str:
    """
    Create a signed JWT for an admin session.

    Args:
        subject: The "sub" claim (always "admin" in this application)
        expires_delta: Optional custom lifetime, defaults to
                       ACCESS_TOKEN_EXPIRE_MINUTES

    Returns:
        A signed JWT string ("xxxxx.yyyyy.zzzzz")
    """
    expire = datetime.now(timezone.utc) + (
        expires_delta
        if expires_delta
        else timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode = {"sub": subject, "exp": expire}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> str | None:
    """
    Validate a session JWT and return its subject.

    Returns:
        The "sub" claim, or None when the signature is invalid, the token
        has expired, or the claim is missing
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
    return payload.get("sub")
