from typing import Any, List, Optional

from streamed.clients.base import BaseClient
from streamed.domain.search import SearchQuery
from streamed.domain.source import RawResult
from streamed.utils.logger import streamlog
from streamed.utils.utils import Indexer, bytes_to_human_readable, normalize_info_hash

# apibay answers an empty search with a single placeholder row
NO_RESULTS_ID = "0"


def _to_int(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


class PirateBay(BaseClient):
    id = "pirate_bay"
    name = Indexer.PIRATE_BAY.value

    def __init__(self, host="https://apibay.org", session=None, timeout=None):
        super().__init__(host, session, timeout)

    def search(
        self, query: SearchQuery, max_results: Optional[int] = None
    ) -> List[RawResult]:
        if not query.text:
            return []
        streamlog(f"Searching The Pirate Bay for {query.text}")
        data = self._request_json("GET", f"{self.host}/q.php", params={"q": query.text})
        results = self.parse_response(data)
        return results[:max_results] if max_results else results

    def parse_response(self, res: Any) -> List[RawResult]:
        if not isinstance(res, list):
            return []
        results = []
        for item in res:
            if str(item.get("id")) == NO_RESULTS_ID:
                continue
            size_bytes = _to_int(item.get("size"))
            results.append(
                RawResult(
                    source=self.id,
                    title=item.get("name") or "Unknown",
                    addon_name=self.name,
                    size=bytes_to_human_readable(size_bytes),
                    size_bytes=size_bytes,
                    seeders=_to_int(item.get("seeders")),
                    leechers=_to_int(item.get("leechers")),
                    date=str(item.get("added") or ""),
                    info_hash=normalize_info_hash(item.get("info_hash")),
                )
            )
        return results
