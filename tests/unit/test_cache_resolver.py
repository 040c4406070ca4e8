import threading

import pytest
from unittest.mock import MagicMock

from streamed.clients.exceptions import (
    AddError,
    NotFoundError,
    ProviderException,
    ResolveError,
)
from streamed.domain.cache_entry import CacheEntry, CacheState
from streamed.services.cache_resolver import CacheResolver, InvalidTransition

HASH = "c" * 40
LIBRARY_HASH = "a" * 40


@pytest.fixture
def client():
    client = MagicMock()
    client.get_available_torrent.return_value = None
    client.get_user_torrent_list.return_value = []
    client.get_torrent.return_value = {"id": 77, "name": "Some.Movie", "progress": 0.5}
    client.add_magnet_link.return_value = {"torrent_id": 77, "hash": HASH, "name": "Some.Movie"}
    return client


@pytest.fixture
def resolver(client):
    return CacheResolver(client)


def test_unknown_hash_is_not_added(resolver):
    assert resolver.state(HASH) == CacheState.NOT_ADDED
    assert resolver.entry(HASH) is None


def test_add_to_cache(resolver, client):
    entry = resolver.add_to_cache(HASH)

    assert entry.state == CacheState.ADDED_AWAITING_URL
    assert entry.torrent_id == 77
    assert entry.progress == 50.0
    client.add_magnet_link.assert_called_once_with(HASH)


def test_add_to_cache_collapses_case(resolver, client):
    first = resolver.add_to_cache(HASH.upper())
    second = resolver.add_to_cache(HASH)

    assert first is second
    assert len(resolver.entries()) == 1
    client.add_magnet_link.assert_called_once()


def test_add_to_cache_keeps_magnet(resolver, client):
    magnet = f"magnet:?xt=urn:btih:{HASH.upper()}&dn=Some.Movie"
    entry = resolver.add_to_cache(magnet)

    assert entry.info_hash == HASH
    client.add_magnet_link.assert_called_once_with(magnet)


def test_add_to_cache_rejects_invalid_hash(resolver, client):
    with pytest.raises(AddError):
        resolver.add_to_cache("not-a-hash")
    client.add_magnet_link.assert_not_called()


def test_concurrent_adds_share_one_request(resolver, client):
    entered = threading.Event()
    release = threading.Event()

    def slow_add(magnet):
        entered.set()
        release.wait(5)
        return {"torrent_id": 77, "hash": HASH, "name": "Some.Movie"}

    client.add_magnet_link.side_effect = slow_add
    results = []

    def add(value):
        results.append(resolver.add_to_cache(value))

    first = threading.Thread(target=add, args=(HASH,))
    first.start()
    assert entered.wait(5)
    second = threading.Thread(target=add, args=(HASH.upper(),))
    second.start()
    release.set()
    first.join(5)
    second.join(5)

    assert client.add_magnet_link.call_count == 1
    assert len(results) == 2
    assert results[0] is results[1]


def test_library_hit_skips_add(resolver, client, torbox_mylist):
    client.get_available_torrent.return_value = torbox_mylist["data"][0]

    entry = resolver.add_to_cache(LIBRARY_HASH)

    assert entry.state == CacheState.ADDED_AWAITING_URL
    assert entry.torrent_id == 1001
    assert len(entry.files) == 4
    client.add_magnet_link.assert_not_called()


def test_failed_add_can_be_retried(resolver, client):
    client.add_magnet_link.side_effect = [
        ProviderException("Download limit exceeded"),
        {"torrent_id": 78, "hash": HASH},
    ]

    with pytest.raises(AddError) as exc:
        resolver.add_to_cache(HASH)
    assert exc.value.message == "Download limit exceeded"
    assert resolver.state(HASH) == CacheState.FAILED
    assert resolver.entry(HASH).error

    entry = resolver.add_to_cache(HASH)
    assert entry.state == CacheState.ADDED_AWAITING_URL
    assert entry.error is None


def test_check_library_hit(resolver, client, torbox_mylist):
    client.get_available_torrent.return_value = torbox_mylist["data"][1]

    entry = resolver.check_library("B" * 40)

    assert entry.info_hash == "b" * 40
    assert entry.state == CacheState.ADDED_AWAITING_URL
    assert entry.progress == 42.0
    assert entry.files[0].id == 7


def test_check_library_miss_resets_entry(resolver, client):
    entry = resolver.add_to_cache(HASH)
    client.get_available_torrent.return_value = None

    assert resolver.check_library(HASH) is None
    assert entry.state == CacheState.NOT_ADDED
    assert entry.torrent_id is None


def test_resolve_url(resolver, client, torbox_mylist):
    client.get_available_torrent.return_value = torbox_mylist["data"][0]
    client.get_torrent.return_value = torbox_mylist["data"][0]
    client.create_download_link.return_value = "https://store-1.torbox.app/dl/e02.mkv"
    entry = resolver.check_library(LIBRARY_HASH)

    url = resolver.resolve_url(entry, file_index=1)

    assert url == "https://store-1.torbox.app/dl/e02.mkv"
    assert entry.state == CacheState.PLAYABLE
    assert entry.is_playable
    client.create_download_link.assert_called_once_with(1001, 1)


def test_resolve_url_not_ready_keeps_entry(resolver, client):
    entry = resolver.add_to_cache(HASH)
    client.create_download_link.side_effect = ResolveError("downloading", not_ready=True)

    with pytest.raises(ResolveError) as exc:
        resolver.resolve_url(entry)
    assert exc.value.not_ready
    assert entry.state == CacheState.ADDED_AWAITING_URL


def test_resolve_url_removed_torrent_fails(resolver, client):
    entry = resolver.add_to_cache(HASH)
    client.create_download_link.side_effect = NotFoundError("Torrent not found", 404)

    with pytest.raises(ResolveError) as exc:
        resolver.resolve_url(entry)
    assert not exc.value.not_ready
    assert entry.state == CacheState.FAILED


def test_resolve_url_without_torrent(resolver):
    with pytest.raises(ResolveError):
        resolver.resolve_url(CacheEntry(info_hash=HASH))


def test_wait_for_url_retries_until_ready(resolver, client, monkeypatch):
    sleeps = []
    monkeypatch.setattr("streamed.services.cache_resolver.time.sleep", sleeps.append)
    entry = resolver.add_to_cache(HASH)
    client.create_download_link.side_effect = [
        ResolveError("downloading", not_ready=True),
        ResolveError("downloading", not_ready=True),
        "https://store-1.torbox.app/dl/file.mkv",
    ]

    url = resolver.wait_for_url(entry, retries=5, interval=0.5)

    assert url == "https://store-1.torbox.app/dl/file.mkv"
    assert sleeps == [0.5, 0.5]


def test_wait_for_url_gives_up(resolver, client, monkeypatch):
    monkeypatch.setattr("streamed.services.cache_resolver.time.sleep", lambda s: None)
    entry = resolver.add_to_cache(HASH)
    client.create_download_link.side_effect = ResolveError("downloading", not_ready=True)

    with pytest.raises(ResolveError):
        resolver.wait_for_url(entry, retries=3)
    assert client.create_download_link.call_count == 3


def test_remove(resolver, client):
    entry = resolver.add_to_cache(HASH)

    resolver.remove(entry)

    client.delete_torrent.assert_called_once_with(77)
    assert entry.state == CacheState.NOT_ADDED
    assert entry.torrent_id is None


def test_rehydrate(resolver, client, torbox_mylist):
    stale = resolver.add_to_cache(HASH)
    client.get_user_torrent_list.return_value = torbox_mylist["data"]

    entries = resolver.rehydrate()

    assert sorted(e.info_hash for e in entries) == ["a" * 40, "b" * 40]
    assert all(e.state == CacheState.ADDED_AWAITING_URL for e in entries)
    assert stale.state == CacheState.NOT_ADDED


def test_subscribers_see_every_transition(resolver):
    seen = []
    unsubscribe = resolver.subscribe(lambda entry: seen.append(entry.state))

    resolver.add_to_cache(HASH)
    unsubscribe()
    resolver.remove(resolver.entry(HASH))

    assert seen == [CacheState.ADDING, CacheState.ADDED_AWAITING_URL]


def test_failing_subscriber_does_not_break_add(resolver):
    resolver.subscribe(MagicMock(side_effect=RuntimeError("boom")))
    entry = resolver.add_to_cache(HASH)
    assert entry.state == CacheState.ADDED_AWAITING_URL


def test_invalid_transition(resolver):
    entry = CacheEntry(info_hash=HASH)
    with pytest.raises(InvalidTransition):
        resolver._transition(entry, CacheState.PLAYABLE)
