"""Token tables used by the enrichers.

Every table is ordered; the first rule that matches wins.
"""
import re


def _rule(pattern, label):
    return re.compile(pattern, re.IGNORECASE), label


CODEC_RULES = [
    _rule(r"\b(hevc|x\.?265|h\.?265)\b", "HEVC"),
    _rule(r"\b(x\.?264|h\.?264|avc)\b", "x264"),
    _rule(r"\bav1\b", "AV1"),
    _rule(r"\bxvid\b", "XVID"),
    _rule(r"\bdivx\b", "DIVX"),
]

HDR_RULES = [
    _rule(r"\b(dolby[\s.]*vision|dovi|dv)\b", "DV"),
    _rule(r"\bhdr10(\+|plus)", "HDR10+"),
    _rule(r"\bhdr10\b", "HDR10"),
    _rule(r"\bhdr\b", "HDR"),
]

AUDIO_RULES = [
    _rule(r"\batmos\b", "Atmos"),
    _rule(r"\b(dts[-\s.]?hd|dts[-\s.]?ma)\b", "DTS-HD"),
    _rule(r"\btrue[-\s.]?hd\b", "TrueHD"),
    _rule(r"\bdts\b", "DTS"),
    _rule(r"(\bdd\+|\bddp|\be[-\s.]?ac[-\s.]?3\b)", "DD+"),
    _rule(r"\b(dd[\s.]?[257]\.?[01]|ac[-\s.]?3)\b", "DD"),
    _rule(r"\baac\b", "AAC"),
]

SOURCE_TYPE_RULES = [
    _rule(r"\bweb[-\s.]?dl\b", "WEB-DL"),
    _rule(r"\bweb[-\s.]?rip\b", "WEBRip"),
    _rule(r"\b(blu[-\s.]?ray|bdrip|brrip|bdremux)\b", "BluRay"),
    _rule(r"\bhdtv\b", "HDTV"),
    _rule(r"\bdvdrip\b", "DVDRip"),
    _rule(r"\b(cam|hdcam|ts|telesync|hdts)\b", "CAM"),
    _rule(r"\bremux\b", "Remux"),
]

LANGUAGE_RULES = [
    _rule(r"\b(english|eng)\b", "EN"),
    _rule(r"\b(italian|ita)\b", "IT"),
    _rule(r"\b(spanish|spa|esp)\b", "ES"),
    _rule(r"\b(french|fra|fre)\b", "FR"),
    _rule(r"\b(german|ger|deu)\b", "DE"),
    _rule(r"\b(portuguese|por)\b", "PT"),
    _rule(r"\b(russian|rus)\b", "RU"),
    _rule(r"\b(hindi|hin)\b", "HI"),
    _rule(r"\b(japanese|jpn)\b", "JA"),
    _rule(r"\b(korean|kor)\b", "KO"),
    _rule(r"\b(chinese|chi|zho)\b", "ZH"),
    _rule(r"\bmulti\b", "MULTI"),
]

# Flag emoji country -> language code, where the two differ
FLAG_LANGUAGES = {
    "GB": "EN",
    "US": "EN",
    "JP": "JA",
    "KR": "KO",
    "CN": "ZH",
    "TW": "ZH",
    "BR": "PT",
    "MX": "ES",
    "IN": "HI",
}

FLAG_REGEX = re.compile(r"[\U0001F1E6-\U0001F1FF]{2}")
# "GB/IT" style dual-language markers
DUAL_LANGUAGE_REGEX = re.compile(r"\b([A-Z]{2})/([A-Z]{2})\b")

# Any of these makes a title a single episode, whatever else it says
SINGLE_EPISODE_PATTERNS = [
    re.compile(r"S\d{1,2}E\d{1,3}", re.IGNORECASE),
    re.compile(r"\b\d{1,2}x\d{1,3}\b", re.IGNORECASE),
    re.compile(r"Episode[\s._-]*\d+", re.IGNORECASE),
]

SEASON_PACK_PATTERNS = [
    re.compile(r"\bS\d{1,2}\b(?!E)", re.IGNORECASE),
    re.compile(r"\bSeason[\s._-]*\d+\b", re.IGNORECASE),
    re.compile(r"\bComplete\b", re.IGNORECASE),
    re.compile(r"\bFull[\s._-]*Season\b", re.IGNORECASE),
    re.compile(r"\bSeasons?[\s._]*\d+\s*[-–]\s*\d+", re.IGNORECASE),
    re.compile(r"\bS\d{1,2}\s*[-–]\s*S?\d{1,2}\b", re.IGNORECASE),
    re.compile(r"\bEntire[\s._-]*Series\b", re.IGNORECASE),
    re.compile(r"\bAll[\s._-]*Episodes?\b", re.IGNORECASE),
]


def first_match(rules, text):
    for regex, label in rules:
        if regex.search(text):
            return label
    return None


def is_season_pack_title(title):
    if not title:
        return False
    if any(p.search(title) for p in SINGLE_EPISODE_PATTERNS):
        return False
    return any(p.search(title) for p in SEASON_PACK_PATTERNS)

# Cached hints addons put in their stream text. "[TB download]" style tags
# mark uncached torrents, so only the "+" form counts
CACHED_MARKER_REGEX = re.compile(
    r"⚡|\[(?:TB|RD)\+\]|\b(?:cached|instant)\b", re.IGNORECASE
)
