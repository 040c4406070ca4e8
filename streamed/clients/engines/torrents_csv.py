from typing import Any, List, Optional

from streamed.clients.base import BaseClient
from streamed.domain.search import SearchQuery
from streamed.domain.source import RawResult
from streamed.utils.logger import streamlog
from streamed.utils.utils import Indexer, bytes_to_human_readable, normalize_info_hash


class TorrentsCsv(BaseClient):
    id = "torrents_csv"
    name = Indexer.TORRENTS_CSV.value

    def __init__(self, host="https://torrents-csv.com", session=None, timeout=None):
        super().__init__(host, session, timeout)

    def search(
        self, query: SearchQuery, max_results: Optional[int] = None
    ) -> List[RawResult]:
        if not query.text:
            return []
        params = {"q": query.text}
        if max_results:
            params["size"] = max_results
        streamlog(f"Searching Torrents CSV for {query.text}")
        data = self._request_json("GET", f"{self.host}/service/search", params=params)
        results = self.parse_response(data)
        return results[:max_results] if max_results else results

    def parse_response(self, res: Any) -> List[RawResult]:
        results = []
        for item in (res or {}).get("torrents") or []:
            size_bytes = item.get("size_bytes") or 0
            results.append(
                RawResult(
                    source=self.id,
                    title=item.get("name") or "Unknown",
                    addon_name=self.name,
                    size=bytes_to_human_readable(size_bytes),
                    size_bytes=size_bytes,
                    seeders=item.get("seeders") or 0,
                    leechers=item.get("leechers") or 0,
                    date=str(item.get("created_unix") or ""),
                    info_hash=normalize_info_hash(item.get("infohash")),
                )
            )
        return results
