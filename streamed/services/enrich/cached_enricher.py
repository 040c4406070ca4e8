from typing import Any, Dict

from streamed.domain.interface.enricher_interface import EnricherInterface
from streamed.services.enrich.rules import CACHED_MARKER_REGEX


class CachedEnricher(EnricherInterface):
    """Marks a result cached when its stream text says so. A cached hint from
    the source is never cleared."""

    def needs(self):
        return ["text", "is_cached"]

    def provides(self):
        return ["is_cached"]

    def enrich(self, item: Dict[str, Any]) -> None:
        item["is_cached"] = bool(item.get("is_cached")) or bool(
            CACHED_MARKER_REGEX.search(item.get("text") or "")
        )
