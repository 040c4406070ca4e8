import re
from typing import Any, Dict, List, Optional, Tuple

from streamed.domain.cache_entry import FileDescriptor
from streamed.utils.utils import is_video

# Samples, subtitles, artwork and bonus material
SKIP_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"sample",
        r"\.(srt|sub|ass|vtt|ssa|nfo|txt|jpe?g|png)$",
        r"featurette",
        r"behind.the.scenes",
        r"deleted.scenes",
        r"extras?[\\/\-.]",
        r"bonus",
        r"trailer",
    )
]

EPISODE_PATTERNS = [
    re.compile(r"[Ss](\d{1,2})[Ee](\d{1,3})"),
    re.compile(r"(\d{1,2})x(\d{1,3})", re.IGNORECASE),
    re.compile(r"Season[\s._-]*(\d{1,2})[\s._-]*Episode[\s._-]*(\d{1,3})", re.IGNORECASE),
]
# Season is implied when only an episode number is present
EPISODE_ONLY_PATTERN = re.compile(r"[Ee](\d{1,3})(?![xX\d])")
NUMBERED_PATTERN = re.compile(r"[\s._-](\d{2,3})[\s._-]")


def base_name(filename: str) -> str:
    return re.split(r"[/\\]", filename)[-1] or filename


def is_valid_video_file(filename: str) -> bool:
    if not is_video(filename):
        return False
    return not any(p.search(filename) for p in SKIP_PATTERNS)


def parse_episode_info(filename: str) -> Optional[Tuple[int, int]]:
    """(season, episode) from a file name, None if it carries no numbering."""
    name = base_name(filename)

    for pattern in EPISODE_PATTERNS:
        match = pattern.search(name)
        if match:
            return int(match.group(1)), int(match.group(2))

    match = EPISODE_ONLY_PATTERN.search(name)
    if match:
        return 1, int(match.group(1))

    match = NUMBERED_PATTERN.search(name)
    if match:
        num = int(match.group(1))
        # 19 and 20 are almost always the start of a year
        if 0 < num < 100 and num not in (19, 20):
            return 1, num
    return None


def to_file_descriptors(files: List[Dict[str, Any]]) -> List[FileDescriptor]:
    descriptors = []
    for index, file in enumerate(files):
        name = file.get("short_name") or file.get("name") or ""
        parsed = parse_episode_info(name)
        descriptors.append(
            FileDescriptor(
                id=file.get("id", index),
                index=index,
                name=name,
                size=file.get("size") or 0,
                is_video=is_valid_video_file(name),
                season=parsed[0] if parsed else None,
                episode=parsed[1] if parsed else None,
            )
        )
    return descriptors


def group_by_season(files: List[FileDescriptor]) -> Dict[int, List[FileDescriptor]]:
    """Video files keyed by season, episodes in order. Video files without
    numbering are grouped under season -1."""
    seasons: Dict[int, List[FileDescriptor]] = {}
    extras = []
    for file in files:
        if not file.is_video:
            continue
        if file.season is None:
            extras.append(file)
            continue
        seasons.setdefault(file.season, []).append(file)

    grouped = {
        season: sorted(episodes, key=lambda f: f.episode)
        for season, episodes in sorted(seasons.items())
    }
    if extras:
        grouped[-1] = extras
    return grouped


def find_episode_file(
    files: List[FileDescriptor], season: int, episode: int
) -> Optional[FileDescriptor]:
    for file in files:
        if file.is_video and file.season == season and file.episode == episode:
            return file
    return None
