import re
from typing import Any, Dict, List, Optional

from streamed.clients.base import HEALTH_IMDB_ID, BaseClient
from streamed.clients.stremio.addons_manager import Addon
from streamed.clients.stremio.stream import Stream
from streamed.domain.search import SearchQuery
from streamed.domain.source import RawResult
from streamed.utils.logger import streamlog
from streamed.utils.utils import Indexer, is_debrid_url


HASH_IN_TEXT_REGEX = re.compile(r"\b([a-fA-F0-9]{40})\b")
HASH_IN_URL_REGEX = re.compile(r"/([a-fA-F0-9]{40})")

SIZE_MARKER_REGEX = re.compile(r"💾\s*([\d.]+\s*(?:GB|MB|KB))", re.IGNORECASE)
SEEDERS_MARKER_REGEX = re.compile(r"👤\s*(\d+)")
PROVIDER_MARKER_REGEX = re.compile(r"⚙️?\s*([^\n]+)")


def parse_torrent_description(desc: str) -> Dict[str, Any]:
    """Size, seeders and provider from the emoji markers addons put in a
    stream's title/description lines."""
    desc = desc or ""
    size_match = SIZE_MARKER_REGEX.search(desc)
    seeders_match = SEEDERS_MARKER_REGEX.search(desc)
    provider_match = PROVIDER_MARKER_REGEX.search(desc)
    return {
        "size": size_match.group(1) if size_match else "",
        "seeders": int(seeders_match.group(1)) if seeders_match else 0,
        "provider": provider_match.group(1).strip() if provider_match else "",
    }


def extract_info_hash(stream: Stream) -> str:
    if stream.infoHash:
        return stream.infoHash.lower()
    if stream.url:
        match = HASH_IN_URL_REGEX.search(stream.url)
        if match:
            return match.group(1).lower()
    if stream.bingeGroup:
        match = HASH_IN_TEXT_REGEX.search(stream.bingeGroup)
        if match:
            return match.group(1).lower()
    return ""


class StremioAddonClient(BaseClient):
    """Any Stremio addon exposing the ``stream`` resource."""

    def __init__(self, addon: Addon, session=None, timeout=None) -> None:
        super().__init__(addon.url(), session, timeout)
        self.addon = addon
        self.id = f"{Indexer.STREMIO.name.lower()}:{addon.key()}"
        if addon.cached:
            self.id += ":cached"
        self.name = addon.manifest.name

    def supports_cached_only(self) -> bool:
        return self.addon.cached

    def stream_url(self, query: SearchQuery) -> Optional[str]:
        video_id = query.stremio_id
        if not video_id:
            return None
        media_type = "series" if query.is_series else "movie"
        if not self.addon.isSupported("stream", video_id):
            return None
        url = f"{self.addon.url()}/stream/{media_type}/{video_id}.json"
        extra = self.addon.query()
        if extra:
            url = f"{url}?{extra}"
        return url

    def search(
        self, query: SearchQuery, max_results: Optional[int] = None
    ) -> List[RawResult]:
        url = self.stream_url(query)
        if not url:
            streamlog(f"{self.name} does not serve {query.stremio_id}")
            return []
        streamlog(f"Searching {query.stremio_id} on {self.name}")
        data = self._request_json("GET", url)
        results = self.parse_response(data)
        return results[:max_results] if max_results else results

    def parse_response(self, res: Any) -> List[RawResult]:
        results = []
        for item in (res or {}).get("streams") or []:
            try:
                stream = Stream(item)
            except ValueError:
                continue
            results.append(self.to_raw_result(stream, item))
        return results

    def to_raw_result(self, stream: Stream, item: Dict[str, Any]) -> RawResult:
        info_hash = extract_info_hash(stream)
        description = stream.full_text()
        parsed = parse_torrent_description(description)

        is_direct = bool(
            stream.url
            and (not stream.infoHash or is_debrid_url(stream.url) or stream.cached)
        )
        return RawResult(
            source=self.id,
            title=stream.get_parsed_title() or stream.name,
            description=description,
            addon_name=self.name,
            size=parsed["size"],
            size_bytes=stream.get_parsed_size() or item.get("sizebytes") or None,
            seeders=item.get("seed") or parsed["seeders"],
            info_hash=info_hash,
            url=stream.url or "",
            file_index=stream.fileIdx,
            is_cached=is_direct or stream.cached,
            is_direct_url=is_direct,
        )

    def check_health(self) -> int:
        url = self.stream_url(SearchQuery(imdb_id=HEALTH_IMDB_ID))
        if not url:
            # Addon without IMDb ids, only check that it answers
            return super().check_health()
        data = self._request_json("GET", url)
        return len((data or {}).get("streams") or [])
