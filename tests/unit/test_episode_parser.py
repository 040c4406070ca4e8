import pytest

from streamed.services.episode_parser import (
    find_episode_file,
    group_by_season,
    is_valid_video_file,
    parse_episode_info,
    to_file_descriptors,
)


@pytest.mark.parametrize(
    "filename, expected",
    [
        ("Show.Name.S01E02.1080p.mkv", (1, 2)),
        ("show.name.s10e105.mkv", (10, 105)),
        ("Show Name 3x07 720p.mp4", (3, 7)),
        ("Show Name Season 2 Episode 4.mkv", (2, 4)),
        ("Pack/Show.Name.E09.mkv", (1, 9)),
        ("Show Name - 12 - Title.mkv", (1, 12)),
        ("Movie.Title.2021.1080p.mkv", None),
    ],
)
def test_parse_episode_info(filename, expected):
    assert parse_episode_info(filename) == expected


def test_is_valid_video_file():
    assert is_valid_video_file("Show.S01E01.mkv")
    assert not is_valid_video_file("sample.mkv")
    assert not is_valid_video_file("Show.S01E01.srt")
    assert not is_valid_video_file("Show.S01E01.Trailer.mp4")


def test_to_file_descriptors(torbox_mylist):
    files = to_file_descriptors(torbox_mylist["data"][0]["files"])

    assert [f.index for f in files] == [0, 1, 2, 3]
    assert [f.is_video for f in files] == [True, True, False, False]
    assert (files[1].season, files[1].episode) == (1, 2)
    assert files[0].name == "Show.Name.S01E01.1080p.mkv"


def test_group_by_season(torbox_mylist):
    files = to_file_descriptors(
        torbox_mylist["data"][0]["files"]
        + [{"id": 9, "short_name": "Show.Name.S02E01.mkv"}, {"id": 10, "short_name": "Opening.Credits.mkv"}]
    )

    grouped = group_by_season(files)

    assert sorted(grouped) == [-1, 1, 2]
    assert [f.episode for f in grouped[1]] == [1, 2]
    assert grouped[2][0].id == 9


def test_find_episode_file(torbox_mylist):
    files = to_file_descriptors(torbox_mylist["data"][0]["files"])
    assert find_episode_file(files, 1, 2).id == 1
    assert find_episode_file(files, 1, 3) is None
