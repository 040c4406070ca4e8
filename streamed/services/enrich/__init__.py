from .cached_enricher import CachedEnricher
from .enricher_builder import EnricherBuilder
from .is_pack_enricher import IsPackEnricher
from .language_enricher import LanguageEnricher
from .quality_enricher import QualityEnricher
from .stats_enricher import StatsEnricher
from .token_enricher import TokenEnricher
from streamed.domain.quality_tier import QualityTier

__all__ = [
    "CachedEnricher",
    "EnricherBuilder",
    "IsPackEnricher",
    "LanguageEnricher",
    "QualityEnricher",
    "StatsEnricher",
    "TokenEnricher",
    "QualityTier",
]
