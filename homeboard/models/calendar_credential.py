"""
Calendar Credential model - the one stored Google OAuth credential.

The dashboard shows a single household calendar, authorized once by the
admin. There is therefore exactly one credential row, keyed by a fixed
identity (CREDENTIAL_ROW_ID). Re-running authorization replaces the row's
values in place; nothing ever inserts a second row.

Example Usage:
    row = CalendarCredential(
        id=CREDENTIAL_ROW_ID,
        refresh_token="1//xxx",
        access_token="ya29.xxx",
        expires_at=datetime.now(timezone.utc) + timedelta(hours=1),
    )
"""

from datetime import datetime, timezone

from sqlalchemy import Integer, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column

from homeboard.db.base import Base

# Fixed primary key of the single credential row
CREDENTIAL_ROW_ID = 1


class CalendarCredential(Base):
    """
    SQLAlchemy ORM model for the 'calendar_credentials' table.

    Holds the refresh token (long-lived, issued once per consent), the
    current access token (short-lived) and the instant it expires.
    """

    __tablename__ = "calendar_credentials"

    # ---------------------------------------------------------------------------
    # PRIMARY KEY
    # ---------------------------------------------------------------------------
    # id: Always CREDENTIAL_ROW_ID; upserts are keyed on it
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, default=CREDENTIAL_ROW_ID, autoincrement=False
    )

    # ---------------------------------------------------------------------------
    # TOKEN DATA
    # ---------------------------------------------------------------------------
    # refresh_token: Used to mint new access tokens without re-consent
    # - Google does not rotate it on refresh, so it only changes on re-authorization
    refresh_token: Mapped[str] = mapped_column(Text, nullable=False)

    # access_token: Sent as "Authorization: Bearer ..." to the Calendar API
    access_token: Mapped[str] = mapped_column(Text, nullable=False)

    # expires_at: Instant the access token stops being valid (UTC)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # ---------------------------------------------------------------------------
    # TIMESTAMPS
    # ---------------------------------------------------------------------------
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<CalendarCredential(id={self.id}, expires_at={self.expires_at})>"
