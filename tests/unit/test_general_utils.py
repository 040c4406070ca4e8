import logging

import pytest
from streamed.utils.utils import (
    bytes_to_human_readable,
    convert_size_to_bytes,
    get_info_hash_from_magnet,
    info_hash_to_magnet,
    is_debrid_url,
    is_magnet_link,
    is_valid_info_hash,
    is_video,
    normalize_info_hash,
    unicode_flag_to_country_code,
)
from streamed.utils.logger import configure_logging, streamlog
from streamed.utils.settings import (
    get_bucket_limit,
    get_list_setting,
    get_setting,
    get_source_timeout,
    reload_settings,
    set_setting,
)


def test_is_magnet_link():
    magnet = "magnet:?xt=urn:btih:1234567890abcdef1234567890abcdef12345678"
    assert is_magnet_link(magnet) == magnet
    assert is_magnet_link("http://example.com") is None
    assert is_magnet_link("not a magnet") is None


def test_info_hash_to_magnet():
    info_hash = "1234567890abcdef1234567890abcdef12345678"
    magnet = info_hash_to_magnet(info_hash)
    assert info_hash in magnet
    assert magnet.startswith("magnet:?xt=urn:btih:")


def test_normalize_info_hash():
    info_hash = "ABCDEF1234567890ABCDEF1234567890ABCDEF12"
    assert normalize_info_hash(info_hash) == info_hash.lower()
    assert normalize_info_hash(f"magnet:?xt=urn:btih:{info_hash}&dn=x") == info_hash.lower()
    assert normalize_info_hash(None) == ""
    assert get_info_hash_from_magnet("not a magnet") == ""


def test_is_valid_info_hash():
    assert is_valid_info_hash("a" * 40)
    assert is_valid_info_hash("ABCDEFGHIJKLMNOPQRSTUVWXYZ234567")
    assert not is_valid_info_hash("z" * 40)
    assert not is_valid_info_hash("")


@pytest.mark.parametrize(
    "size, expected",
    [
        ("1.5 GB", int(1.5 * 1024**3)),
        ("700 MB", 700 * 1024**2),
        ("50", 50 * 1024**2),
        ("512 KB", 512 * 1024),
        ("Unknown", 0),
        ("", 0),
        (None, 0),
    ],
)
def test_convert_size_to_bytes(size, expected):
    assert convert_size_to_bytes(size) == expected


def test_bytes_to_human_readable():
    assert bytes_to_human_readable(0) == "0 B"
    assert bytes_to_human_readable(1024) == "1 KB"
    assert bytes_to_human_readable(int(1.5 * 1024**3)) == "1.5 GB"


def test_is_video():
    assert is_video("movie.mkv")
    assert is_video("MOVIE.MP4")
    assert not is_video("subs.srt")


def test_is_debrid_url():
    assert is_debrid_url("https://store-021.weur.torbox.app/abc/file.mkv")
    assert is_debrid_url("https://download.real-debrid.com/d/XYZ")
    assert not is_debrid_url("https://example.com/video.mp4")
    assert not is_debrid_url(None)


def test_unicode_flag_to_country_code():
    assert unicode_flag_to_country_code("🇺🇸") == "us"
    assert unicode_flag_to_country_code("🇮🇹") == "it"
    assert unicode_flag_to_country_code("x") == "Invalid flag Unicode"


def test_settings_coercion_and_defaults():
    assert get_setting("torrentio_enabled") is True
    assert get_setting("torbox_enabled") is False
    assert get_setting("missing_key", "fallback") == "fallback"
    assert get_source_timeout() == 30
    assert get_bucket_limit() == 10


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("STREAMED_SOURCE_TIMEOUT", "5")
    monkeypatch.setenv("STREAMED_STREMIO_ADDONS", "https://a.example, https://b.example")
    reload_settings()
    assert get_source_timeout() == 5
    assert get_list_setting("stremio_addons") == ["https://a.example", "https://b.example"]


def test_set_setting():
    set_setting("zilean_enabled", True)
    assert get_setting("zilean_enabled") is True
    set_setting("bucket_limit", 25)
    assert get_bucket_limit() == 25


def test_streamlog_prefix(caplog):
    with caplog.at_level(logging.INFO, logger="streamed"):
        streamlog("hello")
        streamlog("careful", level=logging.WARNING)
    assert caplog.records[0].getMessage() == "[###STREAMEDLOG###] hello"
    assert caplog.records[1].levelno == logging.WARNING


def test_configure_logging():
    handler = logging.NullHandler()
    logger = configure_logging(logging.DEBUG, handler=handler)
    try:
        assert handler in logger.handlers
        assert logger.level == logging.DEBUG
    finally:
        logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)
