"""HTTP client that keeps the Yahoo Finance cookie and crumb fresh."""

from __future__ import annotations

import functools
import logging
import threading
from collections.abc import Iterable, Mapping
from typing import Optional, Union

import requests

from .constants import BASE_URL, random_user_agent

ROTATE_THRESHOLD = 1000
"""Number of requests after which cookies and crumb are discarded."""

COOKIE_URL = "https://fc.yahoo.com"
CRUMB_URL = f"{BASE_URL}/v1/test/getcrumb"

_log = logging.getLogger(__name__)

ParamsType = Optional[Union[Mapping[str, str], Iterable[tuple[str, str]]]]


class Client:
    """A session wrapper that attaches Yahoo cookies, crumb and browser headers."""

    def __init__(self, session: Optional[requests.Session] = None) -> None:
        self.session = session if session is not None else requests.Session()
        self._cookies: dict[str, str] = {}
        self._crumb = ""
        self._call_count = 0
        self._lock = threading.Lock()

    @property
    def crumb(self) -> str:
        """The crumb currently attached to requests, empty if none."""
        return self._crumb

    @property
    def call_count(self) -> int:
        """How many public requests have been made."""
        return self._call_count

    def get(self, url: str, params: ParamsType = None) -> requests.Response:
        """Send a GET request, refreshing the session when needed."""
        self._maybe_rotate_session()
        self._ensure_crumb()
        return self._request(url, params)

    def _maybe_rotate_session(self) -> None:
        with self._lock:
            self._call_count += 1
            if self._call_count % ROTATE_THRESHOLD == 0:
                _log.info("rotating Yahoo Finance session (calls=%d)", self._call_count)
                self._cookies = {}
                self._crumb = ""

    def _request(self, url: str, params: ParamsType = None) -> requests.Response:
        if isinstance(params, Mapping):
            pairs = list(params.items())
        else:
            pairs = list(params or ())
        if self._crumb:
            pairs.append(("crumb", self._crumb))
        pairs.sort(key=lambda pair: pair[0])

        headers = {
            "User-Agent": random_user_agent(),
            "Accept-Language": "en-US,en;q=0.9,ko;q=0.8",
            "Accept": "application/json, text/plain, */*",
            "Referer": "https://finance.yahoo.com/",
            "Connection": "keep-alive",
        }
        try:
            return self.session.get(
                url, params=pairs, headers=headers, cookies=dict(self._cookies) or None
            )
        except requests.RequestException:
            _log.error("Failed to get data from Yahoo Finance API", exc_info=True)
            raise

    def _ensure_cookies(self) -> None:
        if self._cookies:
            return
        try:
            response = self._request(COOKIE_URL)
        except requests.RequestException:
            _log.error("Failed to get cookie", exc_info=True)
            return
        with response:
            self._cookies = response.cookies.get_dict()

    def _ensure_crumb(self) -> None:
        if self._crumb:
            return
        self._ensure_cookies()
        try:
            response = self._request(CRUMB_URL)
        except requests.RequestException:
            _log.error("Failed to get crumb", exc_info=True)
            return
        with response:
            self._crumb = response.text


@functools.lru_cache(maxsize=None)
def get_client() -> Client:
    """Return the process-wide shared client."""
    return Client()