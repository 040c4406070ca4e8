from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class CacheState(Enum):
    NOT_ADDED = "NotAdded"
    ADDING = "Adding"
    ADDED_AWAITING_URL = "AddedAwaitingUrl"
    PLAYABLE = "Playable"
    FAILED = "Failed"


# Allowed transitions. FAILED is never terminal: a retry re-enters ADDING and a
# library check that misses the hash resets it to NOT_ADDED.
TRANSITIONS = {
    CacheState.NOT_ADDED: {CacheState.ADDING, CacheState.ADDED_AWAITING_URL},
    CacheState.ADDING: {CacheState.ADDED_AWAITING_URL, CacheState.FAILED},
    CacheState.ADDED_AWAITING_URL: {
        CacheState.PLAYABLE,
        CacheState.FAILED,
        CacheState.NOT_ADDED,
    },
    CacheState.PLAYABLE: {
        CacheState.PLAYABLE,
        CacheState.ADDED_AWAITING_URL,
        CacheState.FAILED,
        CacheState.NOT_ADDED,
    },
    CacheState.FAILED: {
        CacheState.ADDING,
        CacheState.ADDED_AWAITING_URL,
        CacheState.NOT_ADDED,
    },
}


@dataclass
class FileDescriptor:
    id: int
    index: int
    name: str
    size: int = 0
    is_video: bool = False
    season: Optional[int] = None
    episode: Optional[int] = None


@dataclass
class CacheEntry:
    info_hash: str
    torrent_id: Optional[int] = None
    file_index: Optional[int] = None
    stream_url: Optional[str] = None
    state: CacheState = CacheState.NOT_ADDED

    name: str = ""
    size: int = 0
    progress: float = 0.0
    download_state: str = ""
    files: List[FileDescriptor] = field(default_factory=list)
    error: Optional[str] = None

    def __post_init__(self):
        self.info_hash = self.info_hash.lower()

    def can_transition(self, state: CacheState) -> bool:
        return state == self.state or state in TRANSITIONS[self.state]

    @property
    def is_playable(self) -> bool:
        return self.state == CacheState.PLAYABLE and bool(self.stream_url)
