import logging
from typing import Any, List, Optional

import requests

from streamed.clients.base import BaseClient
from streamed.clients.exceptions import NetworkError, ProviderException
from streamed.domain.interface.cache_provider_interface import CacheProviderInterface
from streamed.domain.search import SearchQuery
from streamed.domain.source import RawResult
from streamed.utils.logger import streamlog
from streamed.utils.utils import Indexer, bytes_to_human_readable, normalize_info_hash


class Zilean(BaseClient):
    """DMM hash index. Returns every known torrent for a title, so it is the
    one source whose results are shown without a per-bucket cap."""

    id = "zilean"
    name = Indexer.ZILEAN.value
    unlimited = True

    def __init__(
        self,
        host: str,
        timeout: Optional[int] = None,
        cache_provider: Optional[CacheProviderInterface] = None,
        session=None,
    ) -> None:
        super().__init__(host, session, timeout)
        self.cache_provider = cache_provider

    def supports_cached_only(self) -> bool:
        return self.cache_provider is not None

    def search(
        self, query: SearchQuery, max_results: Optional[int] = None
    ) -> List[RawResult]:
        data = self.api_scrape(query)
        results = self.parse_response(data)
        if query.cached_only and self.cache_provider:
            results = self.filter_cached(results)
        return results[:max_results] if max_results else results

    def api_scrape(self, query: SearchQuery) -> Any:
        if query.imdb_id:
            params = {"ImdbId": query.imdb_id}
            if query.is_series:
                if query.season is not None:
                    params["Season"] = query.season
                if query.episode is not None:
                    params["Episode"] = query.episode
            streamlog(f"Searching Zilean for {params}")
            return self._request_json("GET", f"{self.host}/dmm/filtered", params=params)

        streamlog(f"Searching Zilean for text: {query.text}")
        return self._request_json(
            "POST", f"{self.host}/dmm/search", json={"queryText": query.text}
        )

    def parse_response(self, data: Any) -> List[RawResult]:
        results = []
        for item in data or []:
            info_hash = normalize_info_hash(item.get("info_hash"))
            if not info_hash:
                continue
            size = str(item.get("size") or "")
            size_bytes = int(size) if size.isdigit() else None
            results.append(
                RawResult(
                    source=self.id,
                    title=item.get("raw_title") or "",
                    addon_name=self.name,
                    size=bytes_to_human_readable(size_bytes) if size_bytes else size,
                    size_bytes=size_bytes,
                    info_hash=info_hash,
                    languages=[lang.upper() for lang in item.get("languages") or []],
                )
            )
        return results

    def filter_cached(self, results: List[RawResult]) -> List[RawResult]:
        if not results:
            return results
        cached = self.cache_provider.get_cached_hashes([r.info_hash for r in results])
        filtered = []
        for result in results:
            if result.info_hash in cached:
                result.is_cached = True
                filtered.append(result)
        streamlog(
            f"Zilean: {len(filtered)} of {len(results)} results cached",
            level=logging.DEBUG,
        )
        return filtered

    def check_health(self) -> int:
        try:
            res = self.session.get(f"{self.host}/healthchecks/ping", timeout=self.timeout)
        except requests.exceptions.Timeout:
            raise NetworkError("Timeout")
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Zilean failed to respond: {e}")
        if not res.ok:
            raise ProviderException(f"HTTP {res.status_code}", res.status_code)
        return 0

    def ping(self) -> bool:
        return self.health().is_online
