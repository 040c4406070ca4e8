from typing import Any, List, Optional

from streamed.clients.base import BaseClient
from streamed.domain.search import SearchQuery
from streamed.domain.source import RawResult
from streamed.utils.logger import streamlog
from streamed.utils.utils import Indexer, bytes_to_human_readable, normalize_info_hash

MAX_SIZE = 100


class Knaben(BaseClient):
    id = "knaben"
    name = Indexer.KNABEN.value

    def __init__(self, host="https://api.knaben.org", session=None, timeout=None):
        super().__init__(host, session, timeout)

    def search(
        self, query: SearchQuery, max_results: Optional[int] = None
    ) -> List[RawResult]:
        if not query.text:
            return []
        body = {
            "query": query.text,
            "search_field": "title",
            "size": min(max_results or MAX_SIZE, MAX_SIZE),
            "hide_unsafe": True,
            "hide_xxx": False,
        }
        streamlog(f"Searching Knaben for {query.text}")
        data = self._request_json("POST", f"{self.host}/v1", json=body)
        results = self.parse_response(data)
        return results[:max_results] if max_results else results

    def parse_response(self, res: Any) -> List[RawResult]:
        hits = (res or {}).get("hits") or []
        if not isinstance(hits, list):
            return []
        results = []
        for item in hits:
            size_bytes = item.get("bytes") or item.get("size") or 0
            results.append(
                RawResult(
                    source=self.id,
                    title=item.get("title") or item.get("name") or "Unknown",
                    addon_name=self.name,
                    size=bytes_to_human_readable(size_bytes),
                    size_bytes=size_bytes,
                    seeders=int(item.get("seeders") or 0),
                    leechers=int(item.get("peers") or item.get("leechers") or 0),
                    info_hash=normalize_info_hash(item.get("hash") or item.get("infohash")),
                )
            )
        return results
