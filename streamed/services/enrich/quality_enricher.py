from typing import Any, Dict, List, Optional

from streamed.domain.interface.enricher_interface import EnricherInterface
from streamed.domain.quality_tier import QualityTier


class QualityEnricher(EnricherInterface):
    def __init__(self, tiers: Optional[List[QualityTier]] = None):
        self.tiers = tiers or QualityTier.default_quality_tiers()

    def needs(self):
        return ["text"]

    def provides(self):
        return ["quality", "quality_sort"]

    def enrich(self, item: Dict[str, Any]) -> None:
        text = item.get("text", "")
        for tier in sorted(self.tiers, key=lambda t: -t.priority):
            if tier.matches(text):
                item["quality"] = tier.label
                item["quality_sort"] = tier.priority
                return
