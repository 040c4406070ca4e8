import pytest

from mocks import raw
from streamed.services.enrich import EnricherBuilder, QualityEnricher
from streamed.services.parser import MetadataParser, default_enricher_builder
from streamed.utils.utils import convert_size_to_bytes

HASH = "a" * 40


@pytest.fixture
def parser():
    return MetadataParser()


def test_parse_is_deterministic(parser):
    result = raw(
        "Movie.2023.2160p.WEB-DL.DV.HDR.Atmos.H265",
        HASH.upper(),
        description="👤 152 💾 18.4 GB ⚙️ ThePirateBay",
    )
    assert parser.parse(result) == parser.parse(result)


def test_parse_quality_and_tokens(parser):
    descriptor = parser.parse(raw("Movie.2023.2160p.WEB-DL.DV.HDR.Atmos.H265", HASH.upper()))

    assert descriptor.quality == "4K"
    assert descriptor.quality_sort == 3
    assert descriptor.codec == "HEVC"
    assert descriptor.hdr == "DV"
    assert descriptor.is_hdr
    assert descriptor.audio == "Atmos"
    assert descriptor.source_type == "WEB-DL"
    assert descriptor.info_hash == HASH


@pytest.mark.parametrize(
    "title, quality",
    [
        ("Movie.2021.1080p.BluRay.x264", "1080P"),
        ("Movie.2021.720p.HDTV", "720P"),
        ("Movie.2021.4K.HDR", "4K"),
        ("Movie.2021.DVDRip.XviD", "Other"),
    ],
)
def test_quality_tiers(parser, title, quality):
    assert parser.parse_title(title).quality == quality


def test_higher_tier_wins(parser):
    assert parser.parse_title("Movie 1080p upscaled to 2160p").quality == "4K"


def test_missing_tokens_are_none(parser):
    descriptor = parser.parse_title("Some Movie")
    assert descriptor.codec is None
    assert descriptor.hdr is None
    assert descriptor.audio is None
    assert descriptor.languages == frozenset()


def test_season_pack_detection(parser):
    assert parser.parse_title("Show.Name.S01.Complete.1080p").is_season_pack
    assert parser.parse_title("Show Name Season 2 720p").is_season_pack
    assert not parser.parse_title("Show.Name.S01E05.1080p").is_season_pack
    assert not parser.parse_title("Movie.2021.1080p").is_season_pack


@pytest.mark.parametrize(
    "title",
    [
        "Show.Complete.S01E05.1080p",
        "Show.Season.1.Episode.5",
        "Show.S01-S03.1x05",
    ],
)
def test_single_episode_beats_pack_markers(parser, title):
    assert parser.parse_title(title).is_season_pack is False


def test_dotted_season_is_a_pack(parser):
    assert parser.parse_title("Show.Season.2.1080p").is_season_pack
    assert parser.parse_title("Show.Full.Season.720p").is_season_pack


def test_languages(parser):
    descriptor = parser.parse(
        raw(
            "Movie.2021.1080p.ITA.ENG",
            HASH,
            description="🇬🇧 / 🇮🇹 / 🇯🇵",
            languages=["fr"],
        )
    )
    assert descriptor.languages == frozenset({"EN", "IT", "JA", "FR"})


def test_dual_language_marker(parser):
    assert parser.parse_title("Movie.2021.1080p GB/IT").languages == frozenset({"EN", "IT"})


def test_exact_bytes_win(parser):
    descriptor = parser.parse(
        raw("Movie.1080p", HASH, size="2.1 GB", size_bytes=123456789)
    )
    assert descriptor.size == 123456789


def test_size_and_seeders_from_description(parser):
    descriptor = parser.parse(
        raw("Movie.1080p", HASH, description="👤 87 💾 2.1 GB ⚙️ YTS")
    )
    assert descriptor.size == convert_size_to_bytes("2.1 GB")
    assert descriptor.seeders == 87


def test_size_string(parser):
    assert parser.parse(raw("Movie.1080p", HASH, size="700 MB")).size == 700 * 1024**2


def test_direct_url_fields(parser):
    descriptor = parser.parse(
        raw(
            "Movie.1080p",
            url="https://store.torbox.app/v.mkv",
            is_direct_url=True,
            is_cached=True,
            addon_name="Cached Addon",
        )
    )
    assert descriptor.info_hash == ""
    assert descriptor.key == "https://store.torbox.app/v.mkv"
    assert descriptor.is_direct_url
    assert descriptor.is_cached
    assert descriptor.addon_name == "Cached Addon"


class BrokenEnricher(QualityEnricher):
    def enrich(self, item):
        raise RuntimeError("broken")


def test_failing_enricher_leaves_field_empty():
    builder = EnricherBuilder().add(BrokenEnricher())
    descriptor = MetadataParser(builder).parse_title("Movie.2160p")
    assert descriptor.quality == "Other"


def test_enricher_builder_does_not_mutate_input():
    item = {"title": "Movie.1080p", "text": "Movie.1080p"}
    enriched = EnricherBuilder().add(QualityEnricher()).build(item)
    assert enriched["quality"] == "1080P"
    assert "quality" not in item


def test_enricher_report():
    report = default_enricher_builder().generate_report()
    assert "QualityEnricher" in report
    assert "Provides: languages" in report


@pytest.mark.parametrize(
    "description, cached",
    [
        ("[TB+] Torrentio\n💾 2.1 GB", True),
        ("⚡ Movie.1080p", True),
        ("Instant playback", True),
        ("[TB download] Torrentio\n💾 2.1 GB", False),
        ("👤 12 💾 1.2 TB ⚙️ RARBG", False),
        ("", False),
    ],
)
def test_cached_markers(parser, description, cached):
    descriptor = parser.parse(raw("Movie.1080p", HASH, description=description))
    assert descriptor.is_cached is cached


def test_cached_hint_is_kept(parser):
    descriptor = parser.parse(raw("Movie.1080p", HASH, is_cached=True))
    assert descriptor.is_cached
