"""
Reusable HTTP fetching utilities with browser-like defaults and bounded calls.
"""
from __future__ import annotations

import logging
import math
import threading
import time
from typing import Any, Dict, Optional

import requests

from utils.security import redact_secrets

logger = logging.getLogger(__name__)

BROWSER_HEADERS: Dict[str, str] = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "zh-CN,zh;q=0.9,en;q=0.8",
}

DEFAULT_TIMEOUT = 15.0


class DeadlineExceeded(TimeoutError):
    pass


class Deadline:
    """
    A bounded operation: monotonic expiry plus a cancellation token.

    Child deadlines share nothing with their parent except the bound, so
    cancelling a child never cancels the parent, while an expired or cancelled
    parent makes every child expire too.
    """

    def __init__(self, seconds: Optional[float] = None, parent: Optional["Deadline"] = None) -> None:
        if seconds is None or seconds <= 0:
            self.expires_at = math.inf
        else:
            self.expires_at = time.monotonic() + seconds
        self.parent = parent
        self._cancelled = threading.Event()

    @classmethod
    def unbounded(cls) -> "Deadline":
        return cls(None)

    def child(self, seconds: Optional[float]) -> "Deadline":
        return Deadline(seconds, parent=self)

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        if self._cancelled.is_set():
            return True
        return self.parent.cancelled if self.parent else False

    def remaining(self) -> float:
        own = self.expires_at - time.monotonic()
        if self.parent is not None:
            own = min(own, self.parent.remaining())
        return max(0.0, own)

    @property
    def expired(self) -> bool:
        return self.cancelled or self.remaining() <= 0

    def check(self, what: str = "operation") -> float:
        """Return the remaining seconds or raise if nothing is left."""
        if self.cancelled:
            raise DeadlineExceeded(f"{what} cancelled")
        left = self.remaining()
        if left <= 0:
            raise DeadlineExceeded(f"{what} exceeded its deadline")
        return left


class HttpFetcher:
    """
    Thin wrapper over requests.Session carrying the fixed browser header set.

    Every call makes exactly one attempt; the request timeout is whatever the
    caller's deadline has left, or `default_timeout` when the deadline is
    unbounded. Moving on after a failure is the caller's job.
    """

    def __init__(self, headers: Optional[Dict[str, str]] = None, default_timeout: float = DEFAULT_TIMEOUT) -> None:
        self.default_timeout = default_timeout
        self.session = requests.Session()
        self.session.headers.update(headers or BROWSER_HEADERS)

    def fetch(
        self,
        url: str,
        deadline: Deadline,
        headers: Optional[Dict[str, str]] = None,
    ) -> requests.Response:
        timeout = deadline.check(f"GET {url}")
        # requests has no wall-clock limit, so an unbounded deadline still gets a socket timeout
        if math.isinf(timeout):
            timeout = self.default_timeout
        response = self.session.get(url, headers=headers, timeout=timeout)
        if response.status_code >= 400:
            raise requests.HTTPError(f"HTTP {response.status_code} for {url}", response=response)
        return response

    def get_json(self, url: str, deadline: Deadline, headers: Optional[Dict[str, str]] = None) -> Any:
        return self.fetch(url, deadline, headers=headers).json()

    def get_text(self, url: str, deadline: Deadline, headers: Optional[Dict[str, str]] = None) -> str:
        return self.fetch(url, deadline, headers=headers).text

    def probe(self, url: str, deadline: Deadline) -> bool:
        """Return True when the URL answers with a non-error status. Never raises."""
        try:
            self.fetch(url, deadline)
            return True
        except Exception as exc:
            logger.debug("Probe failed for %s: %s", url, redact_secrets(str(exc)))
            return False
