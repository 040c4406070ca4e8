import logging
import threading
import time
from concurrent.futures import Future
from typing import Any, Callable, Dict, List, Optional

from streamed.clients.debrid.torbox import Torbox
from streamed.clients.exceptions import (
    AddError,
    NotFoundError,
    ProviderException,
    ResolveError,
)
from streamed.domain.cache_entry import CacheEntry, CacheState, FileDescriptor
from streamed.services.episode_parser import to_file_descriptors
from streamed.utils.logger import streamlog
from streamed.utils.utils import is_magnet_link, is_valid_info_hash, normalize_info_hash

Subscriber = Callable[[CacheEntry], None]

DEFAULT_RETRIES = 10
DEFAULT_INTERVAL = 2.0


class InvalidTransition(Exception):
    pass


class CacheResolver:
    """Owns the hash -> CacheEntry registry and drives each entry through
    NotAdded -> Adding -> AddedAwaitingUrl -> Playable on the debrid service.

    Concurrent adds of one hash share a single Future, so the service only
    ever sees one createtorrent call per hash at a time.
    """

    def __init__(self, client: Torbox):
        self.client = client
        self._lock = threading.Lock()
        self._entries: Dict[str, CacheEntry] = {}
        self._inflight: Dict[str, Future] = {}
        self._subscribers: List[Subscriber] = []

    # Registry

    def entry(self, info_hash: str) -> Optional[CacheEntry]:
        with self._lock:
            return self._entries.get(normalize_info_hash(info_hash))

    def state(self, info_hash: str) -> CacheState:
        entry = self.entry(info_hash)
        return entry.state if entry else CacheState.NOT_ADDED

    def entries(self) -> List[CacheEntry]:
        with self._lock:
            return list(self._entries.values())

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe():
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def _get_or_create(self, info_hash: str) -> CacheEntry:
        with self._lock:
            entry = self._entries.get(info_hash)
            if entry is None:
                entry = CacheEntry(info_hash=info_hash)
                self._entries[info_hash] = entry
            return entry

    def _registered(self, entry: CacheEntry) -> CacheEntry:
        """The registry's instance for ``entry``'s hash."""
        with self._lock:
            current = self._entries.setdefault(entry.info_hash, entry)
            if current is not entry and current.torrent_id is None:
                current.torrent_id = entry.torrent_id
            return current

    def _transition(self, entry: CacheEntry, state: CacheState, **changes: Any) -> None:
        with self._lock:
            if not entry.can_transition(state):
                raise InvalidTransition(
                    f"{entry.info_hash}: {entry.state.value} -> {state.value}"
                )
            entry.state = state
            for key, value in changes.items():
                setattr(entry, key, value)
            subscribers = list(self._subscribers)

        streamlog(f"{entry.info_hash} is now {state.value}", level=logging.DEBUG)
        for callback in subscribers:
            try:
                callback(entry)
            except Exception as e:
                streamlog(f"Cache subscriber failed: {e}", level=logging.ERROR)

    def _update_from_torrent(self, entry: CacheEntry, torrent: Dict[str, Any]) -> None:
        progress = torrent.get("progress")
        if progress is None:
            progress = torrent.get("download_progress") or 0
        # TorBox reports either a 0-1 ratio or a percentage
        progress = progress * 100 if progress <= 1 else progress
        with self._lock:
            entry.torrent_id = torrent.get("id", entry.torrent_id)
            entry.name = torrent.get("name") or entry.name
            entry.size = torrent.get("size") or entry.size
            entry.progress = float(progress)
            entry.download_state = torrent.get("download_state") or ""
            if torrent.get("files"):
                entry.files = to_file_descriptors(torrent["files"])

    # Operations

    def check_library(self, info_hash: str) -> Optional[CacheEntry]:
        """Look the hash up in the account library. A hit lands the entry in
        AddedAwaitingUrl; a miss resets a known entry to NotAdded."""
        info_hash = normalize_info_hash(info_hash)
        torrent = self.client.get_available_torrent(info_hash)
        entry = self.entry(info_hash)

        if torrent is None:
            if entry and entry.state not in (CacheState.NOT_ADDED, CacheState.ADDING):
                self._transition(
                    entry,
                    CacheState.NOT_ADDED,
                    torrent_id=None,
                    stream_url=None,
                    files=[],
                )
            return None

        entry = entry or self._get_or_create(info_hash)
        self._update_from_torrent(entry, torrent)
        if entry.state in (CacheState.NOT_ADDED, CacheState.FAILED):
            self._transition(entry, CacheState.ADDED_AWAITING_URL, error=None)
        return entry

    def add_to_cache(self, hash_or_magnet: str) -> CacheEntry:
        info_hash = normalize_info_hash(hash_or_magnet)
        if not is_valid_info_hash(info_hash):
            raise AddError(f"Invalid info hash: {hash_or_magnet!r}")

        with self._lock:
            future = self._inflight.get(info_hash)
            owner = future is None
            if owner:
                future = Future()
                self._inflight[info_hash] = future

        if not owner:
            streamlog(f"Joining in-flight add for {info_hash}", level=logging.DEBUG)
            return future.result()

        try:
            entry = self._add(info_hash, hash_or_magnet)
        except Exception as e:
            future.set_exception(e)
            raise
        else:
            future.set_result(entry)
            return entry
        finally:
            with self._lock:
                self._inflight.pop(info_hash, None)

    def _add(self, info_hash: str, hash_or_magnet: str) -> CacheEntry:
        entry = self._get_or_create(info_hash)
        if entry.torrent_id is not None and entry.state in (
            CacheState.ADDED_AWAITING_URL,
            CacheState.PLAYABLE,
        ):
            return entry

        try:
            torrent = self.client.get_available_torrent(info_hash)
        except ProviderException as e:
            self._fail(entry, e)
            raise AddError(e.message, e.status_code, e.error_content) from e

        if torrent is not None:
            streamlog(f"{info_hash} already in library")
            self._update_from_torrent(entry, torrent)
            self._transition(entry, CacheState.ADDED_AWAITING_URL, error=None)
            return entry

        self._transition(entry, CacheState.ADDING, error=None)
        magnet = hash_or_magnet if is_magnet_link(hash_or_magnet) else info_hash
        try:
            data = self.client.add_magnet_link(magnet)
        except ProviderException as e:
            self._fail(entry, e)
            raise AddError(e.message, e.status_code, e.error_content) from e

        torrent_id = data.get("torrent_id")
        with self._lock:
            entry.torrent_id = torrent_id
            entry.name = data.get("name") or entry.name

        try:
            torrent = self.client.get_torrent(torrent_id)
        except ProviderException as e:
            streamlog(f"Could not refresh {info_hash}: {e}", level=logging.WARNING)
            torrent = None
        if torrent:
            self._update_from_torrent(entry, torrent)

        self._transition(entry, CacheState.ADDED_AWAITING_URL)
        streamlog(f"Added {info_hash} as torrent {torrent_id}")
        return entry

    def _fail(self, entry: CacheEntry, error: Exception) -> None:
        streamlog(f"{entry.info_hash} failed: {error}", level=logging.WARNING)
        if entry.can_transition(CacheState.FAILED):
            self._transition(entry, CacheState.FAILED, error=str(error))
        else:
            with self._lock:
                entry.error = str(error)

    def _file_id(self, entry: CacheEntry, file_index: Optional[int]) -> Optional[int]:
        if file_index is None:
            return None
        if not entry.files:
            self.list_files(entry)
        for file in entry.files:
            if file.index == file_index:
                return file.id
        return file_index

    def resolve_url(self, entry: CacheEntry, file_index: Optional[int] = None) -> str:
        """Request a fresh stream URL. Raises ResolveError with ``not_ready``
        while the service is still preparing the file."""
        entry = self._registered(entry)
        if entry.torrent_id is None:
            raise ResolveError(f"{entry.info_hash} is not in the library")

        file_id = self._file_id(entry, file_index)
        try:
            url = self.client.create_download_link(entry.torrent_id, file_id)
        except ResolveError as e:
            if e.not_ready:
                if entry.state == CacheState.PLAYABLE:
                    self._transition(entry, CacheState.ADDED_AWAITING_URL, stream_url=None)
            else:
                self._fail(entry, e)
            raise
        except NotFoundError as e:
            self._fail(entry, e)
            raise ResolveError(e.message, e.status_code, e.error_content) from e

        if entry.state not in (CacheState.ADDED_AWAITING_URL, CacheState.PLAYABLE):
            self._transition(entry, CacheState.ADDED_AWAITING_URL)
        self._transition(
            entry,
            CacheState.PLAYABLE,
            stream_url=url,
            file_index=file_index,
            error=None,
        )
        return url

    def wait_for_url(
        self,
        entry: CacheEntry,
        file_index: Optional[int] = None,
        retries: int = DEFAULT_RETRIES,
        interval: float = DEFAULT_INTERVAL,
    ) -> str:
        for attempt in range(1, retries + 1):
            try:
                return self.resolve_url(entry, file_index)
            except ResolveError as e:
                if not e.not_ready or attempt == retries:
                    raise
                streamlog(
                    f"{entry.info_hash} not ready ({attempt}/{retries})",
                    level=logging.DEBUG,
                )
                time.sleep(interval)
        raise ResolveError(f"{entry.info_hash} never became ready", not_ready=True)

    def list_files(self, entry: CacheEntry) -> List[FileDescriptor]:
        entry = self._registered(entry)
        if entry.torrent_id is None:
            found = self.check_library(entry.info_hash)
            return found.files if found else []
        torrent = self.client.get_torrent(entry.torrent_id)
        if torrent:
            self._update_from_torrent(entry, torrent)
        return entry.files

    def remove(self, entry: CacheEntry) -> None:
        entry = self._registered(entry)
        if entry.torrent_id is not None:
            self.client.delete_torrent(entry.torrent_id)
            streamlog(f"Removed torrent {entry.torrent_id} ({entry.info_hash})")
        self._transition(
            entry,
            CacheState.NOT_ADDED,
            torrent_id=None,
            stream_url=None,
            files=[],
            progress=0.0,
            download_state="",
        )

    def rehydrate(self) -> List[CacheEntry]:
        """Rebuild the registry from the account library, for a new session."""
        torrents = self.client.get_user_torrent_list()
        seen = set()
        for torrent in torrents:
            info_hash = normalize_info_hash(torrent.get("hash"))
            if not info_hash:
                continue
            seen.add(info_hash)
            entry = self._get_or_create(info_hash)
            self._update_from_torrent(entry, torrent)
            if entry.state in (CacheState.NOT_ADDED, CacheState.FAILED):
                self._transition(entry, CacheState.ADDED_AWAITING_URL, error=None)

        for entry in self.entries():
            if entry.info_hash not in seen and entry.state in (
                CacheState.ADDED_AWAITING_URL,
                CacheState.PLAYABLE,
            ):
                self._transition(entry, CacheState.NOT_ADDED, torrent_id=None, stream_url=None)

        streamlog(f"Rehydrated {len(seen)} library entries")
        return [self.entry(h) for h in seen]
