from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from streamed.domain.source import RawResult


@dataclass
class SearchQuery:
    text: str = ""
    cached_only: bool = False
    imdb_id: Optional[str] = None
    media_type: str = "movie"  # "movie" or "series"
    season: Optional[int] = None
    episode: Optional[int] = None

    @property
    def is_series(self) -> bool:
        return self.media_type == "series"

    @property
    def stremio_id(self) -> Optional[str]:
        if not self.imdb_id:
            return None
        if self.is_series and self.season is not None and self.episode is not None:
            return f"{self.imdb_id}:{self.season}:{self.episode}"
        return self.imdb_id


@dataclass
class SourceSettings:
    id: str
    enabled: bool = True
    max_results: Optional[int] = None


@dataclass
class SearchResultSet:
    query: SearchQuery
    results: List[RawResult] = field(default_factory=list)
    counts_by_source: Dict[str, int] = field(default_factory=dict)
    errors_by_source: Dict[str, str] = field(default_factory=dict)
    cached_only: bool = False
    cancelled: bool = False

    @property
    def total_count(self) -> int:
        return len(self.results)


@dataclass
class WatchResumeProbe:
    info_hash: Optional[str] = None
    url: Optional[str] = None
    file_index: Optional[int] = None

    @property
    def is_debrid(self) -> bool:
        return bool(self.info_hash)


class HealthStatus(Enum):
    ONLINE = "online"
    SLOW = "slow"
    OFFLINE = "offline"


@dataclass
class SourceHealth:
    source: str
    status: HealthStatus
    latency_ms: int = 0
    stream_count: int = 0
    error: Optional[str] = None

    @property
    def is_online(self) -> bool:
        return self.status != HealthStatus.OFFLINE
