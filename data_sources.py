"""
Data Sources Module
HTTP plumbing shared by the country and comparable stock services:
retrying session, client-side rate limiting and JSON fetching.
"""

import logging
import time
from collections import deque
from datetime import datetime, timedelta
from typing import Any, Callable, Deque, Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

logger = logging.getLogger(__name__)

MINUTE = timedelta(minutes=1)


class DataSourceError(RuntimeError):
    """Raised when an external data source cannot deliver a usable response"""


class RateLimitExceeded(DataSourceError):
    """Raised when the daily call budget of a data source is spent"""


class RateLimiter:
    """Sliding one-minute window plus a daily call budget for one API"""

    def __init__(self, calls_per_minute: int = 10, calls_per_day: int = 1000,
                 clock: Callable[[], datetime] = datetime.now):
        self.calls_per_minute = calls_per_minute
        self.calls_per_day = calls_per_day
        self.clock = clock
        self.minute_calls: Deque[datetime] = deque()
        self.day = clock().date()
        self.calls_today = 0

    def _refresh(self) -> datetime:
        """Roll the budget over at midnight and expire calls older than a minute"""
        now = self.clock()
        if now.date() != self.day:
            self.day = now.date()
            self.calls_today = 0
        while self.minute_calls and now - self.minute_calls[0] >= MINUTE:
            self.minute_calls.popleft()
        return now

    def daily_budget_spent(self) -> bool:
        self._refresh()
        return self.calls_today >= self.calls_per_day

    def can_make_call(self) -> bool:
        self._refresh()
        return len(self.minute_calls) < self.calls_per_minute and self.calls_today < self.calls_per_day

    def record_call(self):
        self.minute_calls.append(self._refresh())
        self.calls_today += 1

    def wait_time(self) -> float:
        """Seconds until the minute window has room again"""
        now = self._refresh()
        if len(self.minute_calls) < self.calls_per_minute:
            return 0.0
        return max(0.0, (self.minute_calls[0] + MINUTE - now).total_seconds())

    def acquire(self, api_name: str):
        """Block until a call is allowed; fail fast once the daily budget is spent"""
        while True:
            if self.daily_budget_spent():
                raise RateLimitExceeded(f"Daily request limit of {self.calls_per_day} reached for {api_name}")
            delay = self.wait_time()
            if delay <= 0:
                break
            logger.info(f"Rate limit reached for {api_name}. Waiting {delay:.1f} seconds...")
            time.sleep(delay)

        self.record_call()


def build_session(retries: int = 3, backoff_factor: float = 0.5) -> requests.Session:
    """Create a requests session that retries throttled and failed GETs"""
    retry = Retry(
        total=retries,
        backoff_factor=backoff_factor,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=("GET",),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    session = requests.Session()
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    session.headers.update({"Accept": "application/json"})
    return session


def fetch_json(session: requests.Session, url: str, params: Optional[Dict[str, Any]] = None,
               timeout: float = 30.0) -> Any:
    """
    GET a URL and decode its JSON body.

    Args:
        session: HTTP session to use
        url: Request URL
        params: Query string parameters
        timeout: Seconds before the request is abandoned

    Returns:
        Decoded JSON document

    Raises:
        DataSourceError: On network errors, non-200 status or undecodable body
    """
    try:
        response = session.get(url, params=params, timeout=timeout)
    except requests.RequestException as e:
        raise DataSourceError(f"Can't request {url}: {e}") from e

    if response.status_code != 200:
        raise DataSourceError(f"Status code {response.status_code} for URL={url}")

    try:
        return response.json()
    except ValueError as e:
        raise DataSourceError(f"Malformed JSON returned from {url}") from e
