from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class RawResult:
    # Identification
    source: str = ""  # source id, e.g. "torrentio" or "zilean"
    title: str = ""
    description: str = ""
    addon_name: str = ""

    # Stats
    size: str = ""
    size_bytes: Optional[int] = None
    seeders: int = 0
    leechers: int = 0
    date: str = ""

    # Stream target, infoHash OR direct url
    info_hash: str = ""
    url: str = ""
    file_index: Optional[int] = None

    # Hints from the source
    languages: List[str] = field(default_factory=list)
    is_cached: bool = False
    is_direct_url: bool = False

    @property
    def key(self) -> str:
        return self.info_hash.lower() if self.info_hash else self.url
