"""
Tests for CalendarEventFetcher and the Calendar API client underneath it.
"""

import logging
from datetime import datetime, timedelta, timezone

import pytest

from homeboard.environments.base import (
    ConfigurationError,
    NetworkError,
    NoCredentialError,
    ProviderError,
    TokenRefreshError,
)
from homeboard.environments.google.auth import GoogleCalendarConfig
from homeboard.environments.google.calendar.client import MAX_RESULTS
from homeboard.services.event_fetcher import CalendarEventFetcher
from homeboard.services.week_window import compute_week_window

from conftest import NOW, all_day_event, network_down, timed_event


TIME_MIN = datetime(2024, 6, 10, tzinfo=timezone.utc)
TIME_MAX = datetime(2024, 6, 16, 23, 59, 59, 999000, tzinfo=timezone.utc)


@pytest.fixture
def fetcher(calendar_config, token_manager, google) -> CalendarEventFetcher:
    return CalendarEventFetcher(calendar_config, token_manager, transport=google.transport)


class TestFetchEvents:

    @pytest.mark.asyncio
    async def test_request_shape(self, fetcher, stored_credential, google):
        await fetcher.fetch_events(TIME_MIN, TIME_MAX)

        request = google.events_requests[0]
        assert request.method == "GET"
        assert request.url.path == "/calendar/v3/calendars/family@group.calendar.google.com/events"
        assert request.headers["Authorization"] == "Bearer ya29.stored"
        assert dict(request.url.params) == {
            "timeMin": "2024-06-10T00:00:00+00:00",
            "timeMax": "2024-06-16T23:59:59.999000+00:00",
            "singleEvents": "true",
            "orderBy": "startTime",
            "maxResults": str(MAX_RESULTS),
        }

    @pytest.mark.asyncio
    async def test_calendar_id_is_path_encoded(self, fetcher, stored_credential, google):
        await fetcher.fetch_events(TIME_MIN, TIME_MAX)

        assert "family%40group.calendar.google.com" in str(google.events_requests[0].url)

    @pytest.mark.asyncio
    async def test_events_are_returned_in_provider_order(self, fetcher, stored_credential, google):
        google.events_reply = (200, {"items": [
            all_day_event("holiday", "2024-06-10", "2024-06-11"),
            timed_event("standup", "2024-06-10T09:00:00Z", "2024-06-10T09:15:00Z", htmlLink="https://calendar/e/1"),
            timed_event("lunch", "2024-06-11T12:00:00+02:00", "2024-06-11T13:00:00+02:00", location="Cafe"),
        ]})

        events = await fetcher.fetch_events(TIME_MIN, TIME_MAX)

        assert [e.id for e in events] == ["holiday", "standup", "lunch"]
        assert events[0].is_all_day()
        assert events[1].is_timed()
        assert events[1].html_link == "https://calendar/e/1"
        assert events[2].location == "Cafe"

    @pytest.mark.asyncio
    async def test_empty_calendar(self, fetcher, stored_credential):
        assert await fetcher.fetch_events(TIME_MIN, TIME_MAX) == []

    @pytest.mark.asyncio
    async def test_untitled_event(self, fetcher, stored_credential, google):
        google.events_reply = (200, {"items": [{"id": "x", "start": {"dateTime": "2024-06-10T10:00:00Z"}}]})

        events = await fetcher.fetch_events(TIME_MIN, TIME_MAX)

        assert events[0].get_display_title() == "(No title)"

    @pytest.mark.asyncio
    async def test_refreshes_expired_token_first(self, fetcher, expired_credential, google):
        google.token_reply = (200, {"access_token": "ya29.refreshed", "expires_in": 3599})

        await fetcher.fetch_events(TIME_MIN, TIME_MAX)

        assert [r.url.host for r in google.requests] == ["oauth2.googleapis.com", "www.googleapis.com"]
        assert google.events_requests[0].headers["Authorization"] == "Bearer ya29.refreshed"

    @pytest.mark.asyncio
    async def test_fetch_window(self, fetcher, stored_credential, google):
        window = compute_week_window(NOW)

        await fetcher.fetch_window(window)

        params = google.events_requests[0].url.params
        assert params["timeMin"] == window.start.isoformat()
        assert params["timeMax"] == window.end.isoformat()


class TestFetchErrors:

    @pytest.mark.asyncio
    async def test_missing_configuration_checked_before_token(self, token_manager, google):
        fetcher = CalendarEventFetcher(GoogleCalendarConfig(client_id="id"), token_manager, transport=google.transport)

        with pytest.raises(ConfigurationError) as exc_info:
            await fetcher.fetch_events(TIME_MIN, TIME_MAX)

        assert exc_info.value.missing == ["GOOGLE_CLIENT_SECRET", "GOOGLE_CALENDAR_ID"]
        assert google.requests == []

    @pytest.mark.asyncio
    async def test_no_credential_propagates(self, fetcher, google):
        with pytest.raises(NoCredentialError):
            await fetcher.fetch_events(TIME_MIN, TIME_MAX)

        assert google.events_requests == []

    @pytest.mark.asyncio
    async def test_rejected_refresh_propagates(self, fetcher, expired_credential, google):
        google.token_reply = (400, {"error": "invalid_grant"})

        with pytest.raises(TokenRefreshError):
            await fetcher.fetch_events(TIME_MIN, TIME_MAX)

        assert google.events_requests == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code,hint_word", [
        (401, "re-authorize"),
        (403, "permissions"),
        (404, "GOOGLE_CALENDAR_ID"),
    ])
    async def test_provider_errors_carry_hints(self, fetcher, stored_credential, google, status_code, hint_word):
        google.events_reply = (status_code, {"error": {"code": status_code, "message": "Google says no"}})

        with pytest.raises(ProviderError) as exc_info:
            await fetcher.fetch_events(TIME_MIN, TIME_MAX)

        error = exc_info.value
        assert error.status_code == status_code
        assert error.provider_message == "Google says no"
        assert hint_word in error.hint
        assert "Google says no" in str(error)

    @pytest.mark.asyncio
    async def test_server_error_without_hint(self, fetcher, stored_credential, google):
        google.events_reply = (500, {"error": {"code": 500, "message": "Backend Error"}})

        with pytest.raises(ProviderError) as exc_info:
            await fetcher.fetch_events(TIME_MIN, TIME_MAX)

        assert exc_info.value.status_code == 500
        assert exc_info.value.hint is None
        assert not exc_info.value.requires_reauthorization

    @pytest.mark.asyncio
    async def test_network_error(self, fetcher, stored_credential, google):
        google.events_reply = network_down

        with pytest.raises(NetworkError):
            await fetcher.fetch_events(TIME_MIN, TIME_MAX)

    @pytest.mark.asyncio
    async def test_unauthorized_fetch_refreshes_on_next_call(self, fetcher, stored_credential, google):
        google.events_reply = (401, {"error": {"code": 401, "message": "Invalid Credentials"}})

        with pytest.raises(ProviderError):
            await fetcher.fetch_events(TIME_MIN, TIME_MAX)

        google.events_reply = (200, {"items": []})
        await fetcher.fetch_events(TIME_MIN, TIME_MAX)

        assert len(google.token_requests) == 1
        assert google.events_requests[0].headers["Authorization"] == "Bearer ya29.stored"
        assert google.events_requests[1].headers["Authorization"] == "Bearer ya29.fresh"

    @pytest.mark.asyncio
    async def test_refresh_outage_is_not_a_reauthorization(self, fetcher, expired_credential, google):
        google.token_reply = (503, {"error": "backend_error"})

        with pytest.raises(ProviderError) as exc_info:
            await fetcher.fetch_events(TIME_MIN, TIME_MAX)

        assert not exc_info.value.requires_reauthorization
        assert google.events_requests == []

    @pytest.mark.asyncio
    async def test_truncated_result_is_logged(self, fetcher, stored_credential, google, caplog):
        google.events_reply = (200, {"items": [], "nextPageToken": "page-2"})

        with caplog.at_level(logging.WARNING, logger="homeboard.environments.google.calendar"):
            await fetcher.fetch_events(TIME_MIN, TIME_MAX)

        assert "only the first page" in caplog.text
        assert len(google.events_requests) == 1

    @pytest.mark.asyncio
    async def test_failed_fetch_does_not_touch_credential(self, fetcher, stored_credential, store, google):
        google.events_reply = (500, {"error": {"message": "Backend Error"}})

        with pytest.raises(ProviderError):
            await fetcher.fetch_events(TIME_MIN, TIME_MAX)

        assert store.get() == stored_credential
