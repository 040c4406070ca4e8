from typing import Any, Dict

from streamed.domain.interface.enricher_interface import EnricherInterface
from streamed.services.enrich.rules import is_season_pack_title


class IsPackEnricher(EnricherInterface):
    def needs(self):
        return ["title"]

    def provides(self):
        return ["is_season_pack"]

    def enrich(self, item: Dict[str, Any]) -> None:
        item["is_season_pack"] = is_season_pack_title(item.get("title", ""))
