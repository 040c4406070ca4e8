import logging
import threading
import time
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait
from dataclasses import replace
from typing import Dict, List, Optional, Tuple

from streamed.clients.base import BaseClient
from streamed.clients.exceptions import ProviderException
from streamed.domain.interface.cache_provider_interface import CacheProviderInterface
from streamed.domain.search import (
    SearchQuery,
    SearchResultSet,
    SourceHealth,
    SourceSettings,
)
from streamed.domain.source import RawResult
from streamed.utils.logger import streamlog
from streamed.utils.settings import get_source_timeout

# How often the join loop wakes up to look at the cancel event
POLL_INTERVAL = 0.1


class SearchAggregator:
    """Fans a query out to every enabled source and merges what comes back.

    A source that raises or outlives the timeout is reported with a zero count
    and an error message; the other sources are unaffected.
    """

    def __init__(
        self,
        sources: List[BaseClient],
        timeout: Optional[float] = None,
        cache_provider: Optional[CacheProviderInterface] = None,
    ) -> None:
        self.sources: Dict[str, BaseClient] = {}
        for source in sources:
            if source.id in self.sources:
                raise ValueError(f"Duplicate source id: {source.id}")
            self.sources[source.id] = source
        self.timeout = timeout or get_source_timeout()
        self.cache_provider = cache_provider

    def select_sources(
        self,
        enabled_sources: Optional[List[SourceSettings]],
        cached_only: bool,
    ) -> List[Tuple[BaseClient, Optional[int]]]:
        if enabled_sources is None:
            enabled_sources = [SourceSettings(id=source_id) for source_id in self.sources]

        selected = []
        for settings in enabled_sources:
            client = self.sources.get(settings.id)
            if not settings.enabled or client is None:
                continue
            if cached_only and not client.supports_cached_only():
                streamlog(f"Skipping {client.name}, no cached-only support")
                continue
            selected.append((client, settings.max_results or None))
        return selected

    def search(
        self,
        query: SearchQuery,
        enabled_sources: Optional[List[SourceSettings]] = None,
        cached_only: Optional[bool] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> SearchResultSet:
        if cached_only is None:
            cached_only = query.cached_only
        query = replace(query, cached_only=cached_only)

        result_set = SearchResultSet(query=query, cached_only=cached_only)
        selected = self.select_sources(enabled_sources, cached_only)
        if not selected:
            streamlog("No sources to search")
            return result_set

        outcomes: Dict[str, List[RawResult]] = {}
        executor = ThreadPoolExecutor(max_workers=len(selected))
        futures = {
            executor.submit(self._run_source, client, query, cap): client
            for client, cap in selected
        }
        pending = set(futures)
        deadline = time.monotonic() + self.timeout
        try:
            while pending:
                if cancel_event is not None and cancel_event.is_set():
                    result_set.cancelled = True
                    break
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                done, pending = wait(
                    pending,
                    timeout=min(remaining, POLL_INTERVAL),
                    return_when=FIRST_COMPLETED,
                )
                for future in done:
                    self._collect(futures[future], future, outcomes, result_set)
        finally:
            for future in pending:
                future.cancel()
            executor.shutdown(wait=False, cancel_futures=True)

        for future in pending:
            if future.done() and not future.cancelled():
                self._collect(futures[future], future, outcomes, result_set)
                continue
            client = futures[future]
            if result_set.cancelled:
                result_set.errors_by_source[client.id] = "Search cancelled"
            else:
                streamlog(
                    f"{client.name} timed out after {self.timeout}s",
                    level=logging.WARNING,
                )
                result_set.errors_by_source[client.id] = (
                    f"Timed out after {self.timeout}s"
                )

        for client, _ in selected:
            results = outcomes.get(client.id) or []
            result_set.counts_by_source[client.id] = len(results)
            result_set.results.extend(results)

        if self.cache_provider and result_set.results:
            self.mark_cached(result_set.results)

        streamlog(
            f"Search finished with {result_set.total_count} results "
            f"from {len(outcomes)}/{len(selected)} sources"
        )
        return result_set

    @staticmethod
    def _collect(client, future, outcomes, result_set) -> None:
        try:
            outcomes[client.id] = future.result()
        except Exception as e:
            client.handle_exception(e)
            result_set.errors_by_source[client.id] = str(e)

    @staticmethod
    def _run_source(
        client: BaseClient, query: SearchQuery, cap: Optional[int]
    ) -> List[RawResult]:
        results = client.search(query, cap) or []
        return results[:cap] if cap else results

    def check_health(
        self, enabled_sources: Optional[List[SourceSettings]] = None
    ) -> List[SourceHealth]:
        """Status and latency of every enabled source, checked concurrently."""
        clients = [client for client, _ in self.select_sources(enabled_sources, False)]
        if not clients:
            return []
        with ThreadPoolExecutor(max_workers=len(clients)) as executor:
            return list(executor.map(lambda client: client.health(), clients))

    def mark_cached(self, results: List[RawResult]) -> None:
        hashes = [r.info_hash for r in results if r.info_hash and not r.is_direct_url]
        if not hashes:
            return
        try:
            cached = self.cache_provider.get_cached_hashes(hashes)
        except ProviderException as e:
            streamlog(f"Cache check failed: {e}", level=logging.WARNING)
            return
        for result in results:
            if result.info_hash.lower() in cached:
                result.is_cached = True
