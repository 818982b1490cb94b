"""
Tests for the HTTP session, JSON fetching and rate limiting helpers
"""

from datetime import datetime, timedelta
from unittest.mock import MagicMock, patch

import pytest
import requests

from conftest import make_response
from data_sources import DataSourceError, RateLimitExceeded, RateLimiter, build_session, fetch_json


class TestFetchJson:

    def test_returns_decoded_body(self):
        session = MagicMock()
        session.get.return_value = make_response({"ok": True})

        assert fetch_json(session, "https://x.test", params={"a": 1}, timeout=3) == {"ok": True}
        session.get.assert_called_once_with("https://x.test", params={"a": 1}, timeout=3)

    def test_non_200_status(self):
        session = MagicMock()
        session.get.return_value = make_response(None, status_code=429)

        with pytest.raises(DataSourceError, match="429"):
            fetch_json(session, "https://x.test")

    def test_transport_error(self):
        session = MagicMock()
        session.get.side_effect = requests.Timeout("slow")

        with pytest.raises(DataSourceError, match="Can't request"):
            fetch_json(session, "https://x.test")

    def test_malformed_json(self):
        response = make_response(None)
        response.json.side_effect = ValueError("no json")
        session = MagicMock()
        session.get.return_value = response

        with pytest.raises(DataSourceError, match="Malformed JSON"):
            fetch_json(session, "https://x.test")


class TestRateLimiter:

    def test_minute_limit(self):
        limiter = RateLimiter(calls_per_minute=2, calls_per_day=100)
        limiter.record_call()
        assert limiter.can_make_call()
        limiter.record_call()
        assert not limiter.can_make_call()
        assert 0 < limiter.wait_time() <= 60

    def test_daily_budget_fails_fast(self):
        limiter = RateLimiter(calls_per_minute=10, calls_per_day=1)
        limiter.acquire("test")
        with pytest.raises(RateLimitExceeded):
            limiter.acquire("test")

    def test_acquire_waits_for_minute_window(self):
        limiter = RateLimiter(calls_per_minute=1, calls_per_day=10)
        limiter.acquire("test")

        def fake_sleep(seconds):
            limiter.minute_calls.clear()

        with patch("data_sources.time.sleep", side_effect=fake_sleep) as sleep:
            limiter.acquire("test")

        sleep.assert_called_once()
        assert limiter.calls_today == 2

    def test_window_slides_and_budget_rolls_over(self):
        now = [datetime(2025, 6, 15, 23, 59, 0)]
        limiter = RateLimiter(calls_per_minute=1, calls_per_day=1, clock=lambda: now[0])
        limiter.record_call()

        now[0] += timedelta(seconds=20)
        assert not limiter.can_make_call()
        assert limiter.wait_time() == pytest.approx(40.0)

        # a minute later the window is free and a new day has started
        now[0] += timedelta(seconds=40)
        assert limiter.wait_time() == 0.0
        assert not limiter.daily_budget_spent()
        assert limiter.can_make_call()
        assert limiter.calls_today == 0


def test_build_session_mounts_retrying_adapter():
    session = build_session(retries=5)
    adapter = session.get_adapter("https://api.worldbank.org")

    assert adapter.max_retries.total == 5
    assert 429 in adapter.max_retries.status_forcelist
    assert session.headers["Accept"] == "application/json"
