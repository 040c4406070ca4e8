import re


class QualityTier:

    def __init__(self, pattern: str, label: str, priority: int):
        self.regex = re.compile(pattern, re.IGNORECASE) if pattern else None
        self.label = label
        self.priority = priority

    def matches(self, text: str) -> bool:
        return self.regex is None or bool(self.regex.search(text))

    @staticmethod
    def default_quality_tiers():
        return [
            QualityTier(r"\b(2160p?|4k)\b", "4K", 3),
            QualityTier(r"\b1080p?\b", "1080P", 2),
            QualityTier(r"\b720p?\b", "720P", 1),
            QualityTier(None, "Other", 0),
        ]
