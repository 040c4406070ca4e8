from typing import Any, Dict, List, Pattern, Tuple

from streamed.domain.interface.enricher_interface import EnricherInterface
from streamed.services.enrich.rules import first_match


class TokenEnricher(EnricherInterface):
    """Fills one field from an ordered token table; no match leaves it None."""

    def __init__(self, field: str, rules: List[Tuple[Pattern, str]]):
        self.field = field
        self.rules = rules

    def needs(self):
        return ["text"]

    def provides(self):
        return [self.field]

    def enrich(self, item: Dict[str, Any]) -> None:
        item[self.field] = first_match(self.rules, item.get("text", ""))
