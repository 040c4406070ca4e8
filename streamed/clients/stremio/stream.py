import json


class Stream:
    def __init__(self, json_string):
        if isinstance(json_string, str):
            try:
                data = json.loads(json_string)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON string: {e}")
        elif isinstance(json_string, dict):
            data = json_string
        else:
            raise ValueError("Input must be a JSON string or a dictionary.")

        self.url = data.get("url")
        self.ytId = data.get("ytId")
        self.infoHash = data.get("infoHash")
        self.fileIdx = data.get("fileIdx")

        self.name = data.get("name") or ""
        self.title = data.get("title") or ""  # deprecated
        self.description = data.get("description") or self.title

        behavior_hints = data.get("behaviorHints") or {}
        self.bingeGroup = behavior_hints.get("bingeGroup")
        self.videoSize = behavior_hints.get("videoSize")
        self.filename = behavior_hints.get("filename")
        self.cached = behavior_hints.get("cached") is True

        if not (self.url or self.ytId or self.infoHash):
            raise ValueError(
                "At least one of 'url', 'ytId' or 'infoHash' must be specified."
            )

    def get_parsed_title(self) -> str:
        title = self.filename or self.description or self.title or self.name
        return title.splitlines()[0] if title else ""

    def get_parsed_size(self) -> int:
        return self.videoSize or 0

    def full_text(self) -> str:
        parts = [self.name, self.description]
        if self.title and self.title != self.description:
            parts.append(self.title)
        return "\n".join(p for p in parts if p)

    def __repr__(self):
        return f"Stream(name={self.name}, url={self.url}, ytId={self.ytId}, infoHash={self.infoHash})"
