import threading
from typing import Dict, List, Optional

from streamed.clients.exceptions import AuthError
from streamed.clients.search import SearchAggregator
from streamed.domain.cache_entry import CacheEntry, FileDescriptor
from streamed.domain.search import (
    SearchQuery,
    SearchResultSet,
    SourceHealth,
    SourceSettings,
    WatchResumeProbe,
)
from streamed.domain.source import RawResult
from streamed.domain.stream_descriptor import StreamDescriptor
from streamed.services.cache_resolver import CacheResolver
from streamed.services.lifecycle import RevalidationResult, StreamLifecycleManager
from streamed.services.parser import MetadataParser
from streamed.services.ranking import Bucket, RankedStreams, RankingEngine, SortOrder
from streamed.utils.clients import Sources, build_sources


class StreamEngine:
    """Entry point for the collaborator layer: search, rank, cache, resume."""

    def __init__(
        self,
        sources: Sources,
        parser: Optional[MetadataParser] = None,
        ranking: Optional[RankingEngine] = None,
    ):
        self.sources = sources
        self.aggregator = SearchAggregator(sources.clients, cache_provider=sources.torbox)
        self.parser = parser or MetadataParser()
        self.ranking = ranking or RankingEngine()
        self.resolver = CacheResolver(sources.torbox) if sources.torbox else None
        self.lifecycle = StreamLifecycleManager(self.resolver)

    @classmethod
    def from_settings(cls, settings: Optional[Dict[str, str]] = None) -> "StreamEngine":
        return cls(build_sources(settings))

    def _require_resolver(self) -> CacheResolver:
        if self.resolver is None:
            raise AuthError("TorBox is not configured")
        return self.resolver

    # Search and ranking

    def search(
        self,
        query: SearchQuery,
        enabled_sources: Optional[List[SourceSettings]] = None,
        cached_only: Optional[bool] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> SearchResultSet:
        if enabled_sources is None:
            enabled_sources = self.sources.settings
        return self.aggregator.search(query, enabled_sources, cached_only, cancel_event)

    def health(
        self, enabled_sources: Optional[List[SourceSettings]] = None
    ) -> List[SourceHealth]:
        if enabled_sources is None:
            enabled_sources = self.sources.settings
        return self.aggregator.check_health(enabled_sources)

    def parse(self, raw: RawResult) -> StreamDescriptor:
        return self.parser.parse(raw)

    def parse_all(self, results: List[RawResult]) -> List[StreamDescriptor]:
        return [self.parser.parse(raw) for raw in results]

    def is_unlimited(self, source_id: Optional[str]) -> bool:
        client = self.sources.client(source_id) if source_id else None
        return bool(client and client.unlimited)

    def bucket(
        self,
        descriptors: List[StreamDescriptor],
        quality: Bucket,
        addon_filter: Optional[str] = None,
        sort_order: SortOrder = SortOrder.HIGH_TO_LOW,
        active_source: Optional[str] = None,
        uncapped: bool = False,
    ) -> List[StreamDescriptor]:
        return self.ranking.bucket(
            descriptors,
            quality,
            addon_filter=addon_filter,
            sort_order=sort_order,
            unlimited=self.is_unlimited(active_source),
            uncapped=uncapped,
        )

    def season_packs(
        self,
        descriptors: List[StreamDescriptor],
        active_source: Optional[str] = None,
        uncapped: bool = False,
    ) -> List[StreamDescriptor]:
        return self.ranking.season_packs(
            descriptors,
            unlimited=self.is_unlimited(active_source),
            uncapped=uncapped,
        )

    def buckets(
        self,
        descriptors: List[StreamDescriptor],
        addon_filter: Optional[str] = None,
        sort_order: SortOrder = SortOrder.HIGH_TO_LOW,
        active_source: Optional[str] = None,
        uncapped: bool = False,
    ) -> RankedStreams:
        return self.ranking.buckets(
            descriptors,
            addon_filter=addon_filter,
            sort_order=sort_order,
            unlimited=self.is_unlimited(active_source),
            uncapped=uncapped,
        )

    # Debrid cache

    def check_library(self, info_hash: str) -> Optional[CacheEntry]:
        return self._require_resolver().check_library(info_hash)

    def add_to_cache(self, hash_or_magnet: str) -> CacheEntry:
        return self._require_resolver().add_to_cache(hash_or_magnet)

    def resolve_url(self, entry: CacheEntry, file_index: Optional[int] = None) -> str:
        return self._require_resolver().resolve_url(entry, file_index)

    def list_files(self, entry: CacheEntry) -> List[FileDescriptor]:
        return self._require_resolver().list_files(entry)

    def revalidate(self, probe: WatchResumeProbe) -> RevalidationResult:
        return self.lifecycle.revalidate(probe)

