import logging
from typing import Any, Dict, List, Optional

from streamed.clients.base import HEALTH_IMDB_ID, BaseClient
from streamed.clients.exceptions import ProviderException
from streamed.clients.stremio.stremio import extract_info_hash, parse_torrent_description
from streamed.clients.stremio.stream import Stream
from streamed.domain.interface.cache_provider_interface import CacheProviderInterface
from streamed.domain.search import SearchQuery
from streamed.domain.source import RawResult
from streamed.utils.logger import streamlog
from streamed.utils.utils import Indexer, is_valid_info_hash


class Torrentio(BaseClient):
    id = "torrentio"
    name = Indexer.TORRENTIO.value

    def __init__(
        self,
        host: str,
        debrid_token: Optional[str] = None,
        cache_provider: Optional[CacheProviderInterface] = None,
        session=None,
        timeout=None,
    ) -> None:
        super().__init__(host, session, timeout)
        self.debrid_token = debrid_token
        self.cache_provider = cache_provider

    def supports_cached_only(self) -> bool:
        return bool(self.debrid_token)

    def stream_path(self, query: SearchQuery) -> Optional[str]:
        if not query.imdb_id:
            return None
        if query.is_series:
            if query.season is None or query.episode is None:
                return None
            return f"stream/series/{query.imdb_id}:{query.season}:{query.episode}.json"
        return f"stream/movie/{query.imdb_id}.json"

    def search(
        self, query: SearchQuery, max_results: Optional[int] = None
    ) -> List[RawResult]:
        path = self.stream_path(query)
        if not path:
            streamlog("Torrentio needs an IMDb id and, for series, an episode")
            return []

        if query.cached_only and self.debrid_token:
            results = self.search_cached(path)
        else:
            streamlog(f"Searching for {query.imdb_id} on Torrentio")
            results = self.parse_response(self._request_json("GET", f"{self.host}/{path}"))
        return results[:max_results] if max_results else results

    def search_cached(self, path: str) -> List[RawResult]:
        """The torbox provider path makes Torrentio answer with cached torrents
        only. An empty answer falls back to the plain listing checked against
        the cache provider."""
        url = f"{self.host}/torbox={self.debrid_token}/{path}"
        streamlog("Searching Torrentio through the TorBox provider")
        results = self.parse_response(self._request_json("GET", url), is_cached=True)
        if results or not self.cache_provider:
            return results

        streamlog("No cached Torrentio results, checking the full listing")
        results = self.parse_response(self._request_json("GET", f"{self.host}/{path}"))
        hashes = [r.info_hash for r in results if is_valid_info_hash(r.info_hash)]
        if not hashes:
            return []
        cached = self.cache_provider.get_cached_hashes(hashes)
        cached_results = []
        for result in results:
            if result.info_hash in cached:
                result.is_cached = True
                cached_results.append(result)
        streamlog(
            f"{len(cached_results)} of {len(results)} Torrentio results are cached",
            level=logging.DEBUG,
        )
        return cached_results

    def parse_response(self, res: Any, is_cached: bool = False) -> List[RawResult]:
        results = []
        for item in (res or {}).get("streams") or []:
            try:
                stream = Stream(item)
            except ValueError:
                continue
            parsed = self.parse_stream_title(stream.description)
            info_hash = extract_info_hash(stream)
            results.append(
                RawResult(
                    source=self.id,
                    title=stream.filename or parsed["title"],
                    description=stream.full_text(),
                    addon_name=parsed["provider"] or self.name,
                    size=parsed["size"],
                    size_bytes=stream.get_parsed_size() or None,
                    seeders=parsed["seeders"],
                    info_hash=info_hash,
                    # Debrid playback links are re-resolved through the library
                    url="" if is_cached else (stream.url or ""),
                    file_index=stream.fileIdx,
                    is_cached=is_cached,
                )
            )
        return results

    def parse_stream_title(self, title: str) -> Dict[str, Any]:
        lines = [line for line in (title or "").splitlines() if line.strip()]
        parsed = parse_torrent_description(title)
        parsed["title"] = lines[0].strip() if lines else ""
        return parsed

    def check_health(self) -> int:
        data = self._request_json("GET", f"{self.host}/stream/movie/{HEALTH_IMDB_ID}.json")
        count = len((data or {}).get("streams") or [])
        if not count:
            raise ProviderException("Torrentio returned no streams")
        return count
