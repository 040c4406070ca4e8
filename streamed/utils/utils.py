import re
import unicodedata
from enum import Enum


USER_AGENT_HEADER = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36"
}

JSON_HEADERS = {**USER_AGENT_HEADER, "Accept": "application/json"}

INFO_HASH_REGEX = re.compile(r"^(?:[a-fA-F0-9]{40}|[a-zA-Z2-7]{32})$")
MAGNET_HASH_REGEX = re.compile(r"xt=urn:btih:([a-zA-Z0-9]+)", re.IGNORECASE)
SIZE_REGEX = re.compile(r"(\d+\.?\d*)\s*(GB|MB|KB)?", re.IGNORECASE)

SIZE_UNITS = {
    "GB": 1024**3,
    "MB": 1024**2,
    "KB": 1024,
}

video_extensions = (
    ".mkv",
    ".mp4",
    ".avi",
    ".mov",
    ".wmv",
    ".flv",
    ".webm",
    ".m4v",
    ".ts",
    ".m2ts",
)

DEBRID_DOMAINS = ("torbox", "real-debrid", "alldebrid", "premiumize", "debrid")


class Indexer(Enum):
    STREMIO = "Stremio"
    TORRENTIO = "Torrentio"
    ZILEAN = "Zilean"
    TORRENTS_CSV = "Torrents CSV"
    YTS = "YTS"
    PIRATE_BAY = "The Pirate Bay"
    KNABEN = "Knaben"
    SOLID_TORRENTS = "SolidTorrents"


def info_hash_to_magnet(info_hash):
    return f"magnet:?xt=urn:btih:{info_hash}"


def is_magnet_link(link):
    if link and link.startswith("magnet:?"):
        return link


def get_info_hash_from_magnet(magnet):
    match = MAGNET_HASH_REGEX.search(magnet or "")
    return match.group(1) if match else ""


def normalize_info_hash(value):
    """Lowercased info hash from a bare hash or a magnet link, "" if absent."""
    if not value:
        return ""
    value = value.strip()
    if is_magnet_link(value):
        value = get_info_hash_from_magnet(value)
    return value.lower()


def is_valid_info_hash(value):
    return bool(value and INFO_HASH_REGEX.match(value))


def is_video(s):
    return s.lower().endswith(video_extensions)


def is_debrid_url(url):
    url = (url or "").lower()
    return any(domain in url for domain in DEBRID_DOMAINS)


def convert_size_to_bytes(size_str) -> int:
    """Convert a "<number> <unit>" size string to bytes, unit defaults to MB."""
    if not size_str or size_str == "Unknown":
        return 0
    match = SIZE_REGEX.search(str(size_str))
    if not match:
        return 0
    value = float(match.group(1))
    unit = (match.group(2) or "MB").upper()
    return int(value * SIZE_UNITS.get(unit, SIZE_UNITS["MB"]))


def bytes_to_human_readable(size):
    if not size:
        return "0 B"
    units = ["B", "KB", "MB", "GB", "TB"]
    index = 0
    size = float(size)
    while size >= 1024 and index < len(units) - 1:
        size /= 1024
        index += 1
    return f"{round(size, 2):g} {units[index]}"


def unicode_flag_to_country_code(unicode_flag):
    if len(unicode_flag) != 2:
        return "Invalid flag Unicode"

    first_letter = unicodedata.name(unicode_flag[0]).replace(
        "REGIONAL INDICATOR SYMBOL LETTER ", ""
    )
    second_letter = unicodedata.name(unicode_flag[1]).replace(
        "REGIONAL INDICATOR SYMBOL LETTER ", ""
    )

    country_code = first_letter.lower() + second_letter.lower()
    return country_code
