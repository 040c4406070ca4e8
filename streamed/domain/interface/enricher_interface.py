import abc
from typing import Any, Dict, List


class EnricherInterface(abc.ABC):
    @abc.abstractmethod
    def enrich(self, item: Dict[str, Any]) -> None:
        """Enrich an item with additional metadata"""
        pass

    @abc.abstractmethod
    def needs(self) -> List[str]:
        """Returns the fields that the enricher needs to function"""
        pass

    @abc.abstractmethod
    def provides(self) -> List[str]:
        """Returns the fields that the enricher will provide"""
        pass
