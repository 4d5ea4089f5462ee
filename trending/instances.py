"""
Selection of a responsive feed proxy instance.
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from crawler.infra.http import Deadline, HttpFetcher

logger = logging.getLogger(__name__)

DEFAULT_PROBE_TIMEOUT = 5.0


class InstanceSelector:
    """
    Probes candidate proxy bases in configured order and picks the first that
    answers `GET {base}/` with a non-error status.

    When every candidate fails, the first configured one is returned anyway;
    later feed fetches against it will fail and fall through to the next
    strategy, which is acceptable.
    """

    def __init__(
        self,
        candidates: Iterable[str],
        fetcher: Optional[HttpFetcher] = None,
        probe_timeout: float = DEFAULT_PROBE_TIMEOUT,
    ) -> None:
        self.candidates: List[str] = [c.strip() for c in candidates if c and c.strip()]
        if not self.candidates:
            raise ValueError("InstanceSelector requires at least one candidate instance")
        self.fetcher = fetcher or HttpFetcher()
        self.probe_timeout = probe_timeout

    def select(self, deadline: Optional[Deadline] = None) -> str:
        for candidate in self.candidates:
            bounded = deadline.child(self.probe_timeout) if deadline else Deadline(self.probe_timeout)
            if bounded.expired:
                logger.warning("Run deadline reached while probing instances")
                break
            if self.fetcher.probe(f"{candidate.rstrip('/')}/", bounded):
                logger.info("Using proxy instance %s", candidate)
                return candidate
            logger.info("Proxy instance %s did not respond", candidate)
        fallback = self.candidates[0]
        logger.warning("No proxy instance responded; falling back to %s", fallback)
        return fallback
