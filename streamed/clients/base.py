import logging
import time
from abc import ABC, abstractmethod
from typing import Any, List, Optional

import requests
from requests import Session

from streamed.clients.exceptions import (
    NetworkError,
    ParseError,
    ProviderException,
    RateLimitError,
)
from streamed.domain.search import HealthStatus, SearchQuery, SourceHealth
from streamed.domain.source import RawResult
from streamed.utils.logger import streamlog
from streamed.utils.settings import get_source_timeout
from streamed.utils.utils import JSON_HEADERS, USER_AGENT_HEADER

# Answers slower than this are reported as slow rather than online
SLOW_RESPONSE_MS = 2000
# Title Stremio sources are health checked with (The Matrix)
HEALTH_IMDB_ID = "tt0133093"


class BaseClient(ABC):
    # Source id used as the key in counts and settings
    id: str = ""
    name: str = ""
    # Sources that can return every match instead of a short best-of list
    unlimited: bool = False

    def __init__(
        self,
        host: Optional[str],
        session: Optional[Session] = None,
        timeout: Optional[int] = None,
    ) -> None:
        self.host = host.rstrip("/") if host else ""
        self.session = session or Session()
        self.timeout = timeout or get_source_timeout()

    @abstractmethod
    def search(
        self, query: SearchQuery, max_results: Optional[int] = None
    ) -> List[RawResult]:
        pass

    @abstractmethod
    def parse_response(self, res: Any) -> List[RawResult]:
        pass

    def _request_json(self, method: str, url: str, **kwargs) -> Any:
        kwargs.setdefault("headers", JSON_HEADERS)
        kwargs.setdefault("timeout", self.timeout)
        try:
            res = self.session.request(method, url, **kwargs)
        except requests.exceptions.Timeout as e:
            raise NetworkError(f"{self.name} timed out: {e}")
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"{self.name} request failed: {e}")

        if res.status_code == 429:
            raise RateLimitError(f"{self.name} rate limit exceeded", res.status_code)
        if res.status_code != 200:
            raise ProviderException(f"{self.name} error", res.status_code)
        try:
            return res.json()
        except ValueError as e:
            raise ParseError(f"{self.name} returned invalid JSON: {e}")

    def supports_cached_only(self) -> bool:
        """Whether the source can restrict itself to debrid-cached content."""
        return False

    def check_health(self) -> int:
        """Hit the source once and return how many streams it answered with.
        Raises on any failure."""
        try:
            res = self.session.head(
                self.host,
                headers=USER_AGENT_HEADER,
                timeout=self.timeout,
                allow_redirects=True,
            )
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"{self.name} request failed: {e}")
        if not res.ok:
            raise ProviderException(f"HTTP {res.status_code}", res.status_code)
        return 0

    def health(self) -> SourceHealth:
        start = time.monotonic()
        try:
            stream_count = self.check_health()
        except ProviderException as e:
            latency_ms = int((time.monotonic() - start) * 1000)
            self.handle_exception(e)
            return SourceHealth(
                self.id, HealthStatus.OFFLINE, latency_ms, error=e.message
            )

        latency_ms = int((time.monotonic() - start) * 1000)
        status = HealthStatus.SLOW if latency_ms > SLOW_RESPONSE_MS else HealthStatus.ONLINE
        return SourceHealth(self.id, status, latency_ms, stream_count)

    def handle_exception(self, exception: Any) -> None:
        exception_message = str(exception)
        if len(exception_message) > 70:
            exception_message = exception_message[:70] + "..."
        streamlog(f"{self.name}: {exception_message}", level=logging.WARNING)
