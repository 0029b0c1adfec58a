"""
Credential Store - durable storage of the single calendar credential.

Contract:
    get() -> Credential | None     None means "not authorized yet" (normal on first run)
    put(Credential) -> None        upsert of the one row; replaces all three values

Any database failure raises CredentialStoreError, so callers can tell an
unreachable store apart from a deployment that simply has no credential.

Concurrent writers are last-write-wins; no version column is used.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from homeboard.environments.base import CredentialStoreError
from homeboard.models.calendar_credential import CalendarCredential, CREDENTIAL_ROW_ID


logger = logging.getLogger("homeboard.services.credential_store")


@dataclass(frozen=True)
class Credential:
    """
    The calendar credential: refresh token, current access token, expiry.

    expires_at is always timezone-aware (UTC).
    """
    refresh_token: str
    access_token: str
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        """True once `now` has reached expires_at (no grace window)."""
        return now >= self.expires_at


def _as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; everything stored is UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class CredentialStore(ABC):
    """Storage contract used by the TokenLifecycleManager."""

    @abstractmethod
    def get(self) -> Optional[Credential]:
        """Return the stored credential, or None if none exists yet."""
        pass

    @abstractmethod
    def put(self, credential: Credential) -> None:
        """Insert or replace the stored credential."""
        pass


class SqlCredentialStore(CredentialStore):
    """
    CredentialStore backed by the 'calendar_credentials' table.

    Uses the request's SQLAlchemy session; put() commits on its own so the
    credential is durable before the caller continues.
    """

    def __init__(self, db: Session):
        self.db = db

    def get(self) -> Optional[Credential]:
        try:
            row = self.db.get(CalendarCredential, CREDENTIAL_ROW_ID)
        except SQLAlchemyError as e:
            logger.error(f"Failed to read calendar credential: {e}")
            raise CredentialStoreError(f"Credential store unreachable: {e}") from e

        if row is None:
            return None

        return Credential(
            refresh_token=row.refresh_token,
            access_token=row.access_token,
            expires_at=_as_utc(row.expires_at),
        )

    def put(self, credential: Credential) -> None:
        try:
            row = self.db.get(CalendarCredential, CREDENTIAL_ROW_ID)
            if row is None:
                row = CalendarCredential(id=CREDENTIAL_ROW_ID)
                self.db.add(row)

            row.refresh_token = credential.refresh_token
            row.access_token = credential.access_token
            row.expires_at = _as_utc(credential.expires_at)

            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to store calendar credential: {e}")
            raise CredentialStoreError(f"Failed to store calendar credential: {e}") from e

        logger.info(f"Stored calendar credential (expires_at={credential.expires_at.isoformat()})")
