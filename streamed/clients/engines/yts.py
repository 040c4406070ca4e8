from typing import Any, List, Optional

from streamed.clients.base import BaseClient
from streamed.domain.search import SearchQuery
from streamed.domain.source import RawResult
from streamed.utils.logger import streamlog
from streamed.utils.utils import Indexer, bytes_to_human_readable, normalize_info_hash

# API refuses larger pages
MAX_LIMIT = 50


class Yts(BaseClient):
    """Movies only; every movie hit expands into one result per torrent."""

    id = "yts"
    name = Indexer.YTS.value

    def __init__(self, host="https://yts.lt", session=None, timeout=None):
        super().__init__(host, session, timeout)

    def search(
        self, query: SearchQuery, max_results: Optional[int] = None
    ) -> List[RawResult]:
        if query.is_series or not query.text:
            return []
        params = {
            "query_term": query.text,
            "limit": min(max_results or MAX_LIMIT, MAX_LIMIT),
        }
        streamlog(f"Searching YTS for {query.text}")
        data = self._request_json(
            "GET", f"{self.host}/api/v2/list_movies.json", params=params
        )
        results = self.parse_response(data)
        return results[:max_results] if max_results else results

    def parse_response(self, res: Any) -> List[RawResult]:
        if not res or res.get("status") != "ok":
            return []
        movies = (res.get("data") or {}).get("movies") or []
        results = []
        for movie in movies:
            movie_title = movie.get("title_long") or movie.get("title") or ""
            for torrent in movie.get("torrents") or []:
                size_bytes = torrent.get("size_bytes") or 0
                results.append(
                    RawResult(
                        source=self.id,
                        title=f"{movie_title} [{torrent.get('quality', '')} {torrent.get('type', '')}]",
                        addon_name=self.name,
                        size=bytes_to_human_readable(size_bytes),
                        size_bytes=size_bytes,
                        seeders=torrent.get("seeds") or 0,
                        leechers=torrent.get("peers") or 0,
                        date=str(torrent.get("date_uploaded_unix") or ""),
                        info_hash=normalize_info_hash(torrent.get("hash")),
                    )
                )
        return results
