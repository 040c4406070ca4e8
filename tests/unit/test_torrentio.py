import pytest
from unittest.mock import MagicMock

from mocks import make_response
from streamed.clients.exceptions import ProviderException, RateLimitError
from streamed.clients.torrentio import Torrentio
from streamed.domain.search import SearchQuery

HOST = "https://torrentio.example"
HASH_C = "c" * 40
HASH_D = "d" * 40


@pytest.fixture
def movie():
    return SearchQuery(imdb_id="tt1234567")


def test_stream_path():
    client = Torrentio(HOST, session=MagicMock())
    assert client.stream_path(SearchQuery(imdb_id="tt1")) == "stream/movie/tt1.json"
    assert (
        client.stream_path(
            SearchQuery(imdb_id="tt1", media_type="series", season=2, episode=5)
        )
        == "stream/series/tt1:2:5.json"
    )
    assert client.stream_path(SearchQuery(text="no id")) is None


def test_series_without_episode_is_skipped(mock_session):
    client = Torrentio(HOST, session=mock_session)
    season_only = SearchQuery(imdb_id="tt1", media_type="series", season=2)

    assert client.stream_path(season_only) is None
    assert client.stream_path(SearchQuery(imdb_id="tt1", media_type="series")) is None
    assert client.search(season_only) == []
    mock_session.request.assert_not_called()


def test_search(mock_session, torrentio_streams, movie):
    mock_session.request.return_value = make_response(200, torrentio_streams)
    client = Torrentio(HOST, session=mock_session)

    results = client.search(movie)

    args, _ = mock_session.request.call_args
    assert args == ("GET", f"{HOST}/stream/movie/tt1234567.json")
    assert len(results) == 2

    first, second = results
    assert first.title == "Movie.Title.2021.2160p.WEB-DL.DV.HDR.DDP5.1.Atmos.H.265-GRP.mkv"
    assert first.info_hash == HASH_C
    assert first.size == "18.4 GB"
    assert first.seeders == 152
    assert first.addon_name == "ThePirateBay"
    assert first.file_index == 0
    assert "🇬🇧" in first.description
    assert second.title == "Movie.Title.2021.1080p.BluRay.x264.AAC-GRP"
    assert second.addon_name == "YTS"
    assert not second.is_cached


def test_search_without_imdb_id(mock_session):
    client = Torrentio(HOST, session=mock_session)
    assert client.search(SearchQuery(text="Movie")) == []
    mock_session.request.assert_not_called()


def test_search_max_results(mock_session, torrentio_streams, movie):
    mock_session.request.return_value = make_response(200, torrentio_streams)
    client = Torrentio(HOST, session=mock_session)
    assert len(client.search(movie, max_results=1)) == 1


def test_cached_only_support_needs_token():
    assert not Torrentio(HOST, session=MagicMock()).supports_cached_only()
    assert Torrentio(HOST, "token", session=MagicMock()).supports_cached_only()


def test_cached_search_uses_provider_path(mock_session, torrentio_streams):
    mock_session.request.return_value = make_response(200, torrentio_streams)
    client = Torrentio(HOST, "secret", session=mock_session)

    results = client.search(SearchQuery(imdb_id="tt1234567", cached_only=True))

    args, _ = mock_session.request.call_args
    assert args[1] == f"{HOST}/torbox=secret/stream/movie/tt1234567.json"
    assert all(r.is_cached for r in results)
    assert all(r.url == "" for r in results)


def test_cached_search_falls_back_to_cache_check(mock_session, torrentio_streams):
    mock_session.request.side_effect = [
        make_response(200, {"streams": []}),
        make_response(200, torrentio_streams),
    ]
    provider = MagicMock()
    provider.get_cached_hashes.return_value = {HASH_D: {"hash": HASH_D}}
    client = Torrentio(HOST, "secret", cache_provider=provider, session=mock_session)

    results = client.search(SearchQuery(imdb_id="tt1234567", cached_only=True))

    assert [r.info_hash for r in results] == [HASH_D]
    assert results[0].is_cached
    provider.get_cached_hashes.assert_called_once_with([HASH_C, HASH_D])


def test_rate_limited(mock_session, movie):
    mock_session.request.return_value = make_response(429, {})
    with pytest.raises(RateLimitError):
        Torrentio(HOST, session=mock_session).search(movie)


def test_server_error(mock_session, movie):
    mock_session.request.return_value = make_response(503, {})
    with pytest.raises(ProviderException):
        Torrentio(HOST, session=mock_session).search(movie)
