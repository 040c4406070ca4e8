from dataclasses import dataclass, field
from typing import FrozenSet, Optional


@dataclass(frozen=True)
class StreamDescriptor:
    title: str = ""
    source: str = ""
    info_hash: str = ""
    url: str = ""
    file_index: Optional[int] = None

    quality: str = "Other"
    quality_sort: int = 0
    codec: Optional[str] = None
    hdr: Optional[str] = None
    audio: Optional[str] = None
    source_type: Optional[str] = None
    languages: FrozenSet[str] = field(default_factory=frozenset)

    size: int = 0
    seeders: int = 0

    addon_name: str = ""
    is_season_pack: bool = False
    is_cached: bool = False
    is_direct_url: bool = False

    @property
    def is_hdr(self) -> bool:
        return self.hdr is not None

    @property
    def key(self) -> str:
        return self.info_hash or self.url
