from datetime import datetime
from typing import Any, List, Optional

from streamed.clients.base import BaseClient
from streamed.domain.search import SearchQuery
from streamed.domain.source import RawResult
from streamed.utils.logger import streamlog
from streamed.utils.utils import Indexer, bytes_to_human_readable, normalize_info_hash

MAX_LIMIT = 100


def _imported_unix(value) -> str:
    """ISO ``imported`` timestamp as unix seconds, "" when missing."""
    if not value:
        return ""
    try:
        return str(int(datetime.fromisoformat(value.replace("Z", "+00:00")).timestamp()))
    except (TypeError, ValueError):
        return ""


class SolidTorrents(BaseClient):
    id = "solid_torrents"
    name = Indexer.SOLID_TORRENTS.value

    def __init__(self, host="https://solidtorrents.to", session=None, timeout=None):
        super().__init__(host, session, timeout)

    def search(
        self, query: SearchQuery, max_results: Optional[int] = None
    ) -> List[RawResult]:
        if not query.text:
            return []
        params = {
            "q": query.text,
            "limit": min(max_results or MAX_LIMIT, MAX_LIMIT),
            "sort": "seeders",
        }
        streamlog(f"Searching SolidTorrents for {query.text}")
        data = self._request_json("GET", f"{self.host}/api/v1/search", params=params)
        results = self.parse_response(data)
        return results[:max_results] if max_results else results

    def parse_response(self, res: Any) -> List[RawResult]:
        results = []
        for item in (res or {}).get("results") or []:
            swarm = item.get("swarm") or {}
            size_bytes = item.get("size") or None
            results.append(
                RawResult(
                    source=self.id,
                    title=item.get("title") or "Unknown",
                    addon_name=self.name,
                    size=bytes_to_human_readable(size_bytes) if size_bytes else "",
                    size_bytes=size_bytes,
                    seeders=swarm.get("seeders") or item.get("seeders") or 0,
                    leechers=swarm.get("leechers") or item.get("leechers") or 0,
                    date=_imported_unix(item.get("imported")),
                    info_hash=normalize_info_hash(item.get("infohash")),
                )
            )
        return results
