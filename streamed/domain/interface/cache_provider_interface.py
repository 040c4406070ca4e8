from abc import ABC, abstractmethod
from typing import Dict, List

from streamed.domain.cached_source import CachedSource


class CacheProviderInterface(ABC):
    @abstractmethod
    def get_cached_hashes(self, info_hashes: List[str]) -> Dict[str, CachedSource]:
        """Lowercased hash -> cache details for every hash already cached."""
        pass
