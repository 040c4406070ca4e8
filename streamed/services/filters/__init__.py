from typing import Any, Iterable, List, Optional

from streamed.domain.interface.filter_interface import FilterInterface
from streamed.domain.stream_descriptor import StreamDescriptor


class FieldFilter(FilterInterface):
    def __init__(self, field: str, value: Any):
        self.field = field
        self.value = value

    def matches(self, item: StreamDescriptor) -> bool:
        return getattr(item, self.field, None) == self.value


class DedupeFilter(FilterInterface):
    """Keeps the first descriptor per info hash. Direct URLs carry no hash
    identity and are always kept."""

    def __init__(self):
        self.seen = set()

    def matches(self, item: StreamDescriptor) -> bool:
        if item.is_direct_url or not item.info_hash:
            return True
        info_hash = item.info_hash.lower()
        if info_hash in self.seen:
            return False
        self.seen.add(info_hash)
        return True

    def reset(self):
        self.seen.clear()


class QualityFilter(FilterInterface):
    def __init__(self, labels: Iterable[str], exclude: bool = False):
        self.labels = set(labels)
        self.exclude = exclude

    def matches(self, item: StreamDescriptor) -> bool:
        return (item.quality in self.labels) != self.exclude


class AddonFilter(FilterInterface):
    def __init__(self, addon_name: str):
        self.addon_name = addon_name

    def matches(self, item: StreamDescriptor) -> bool:
        return item.addon_name == self.addon_name or item.source == self.addon_name


class FilterBuilder(FilterInterface):
    def __init__(self, operator: str = "AND"):
        self._filters: List[FilterInterface] = []
        self._operator = operator.upper()
        self._sort_criteria: List[tuple] = []
        self._limit: int = 0

    def matches(self, item: StreamDescriptor) -> bool:
        if not self._filters:
            return True

        # Short-circuits, so a dedupe filter added last only records
        # items that passed everything before it
        results = (f.matches(item) for f in self._filters)
        if self._operator == "AND":
            return all(results)
        elif self._operator == "OR":
            return any(results)
        else:
            raise ValueError(f"Invalid operator: {self._operator}. Use 'AND' or 'OR'.")

    def reset(self):
        for f in self._filters:
            f.reset()

    def sort_by(self, field: str, ascending: bool = True) -> "FilterBuilder":
        self._sort_criteria.append((field, ascending))
        return self

    def limit(self, n: Optional[int]) -> "FilterBuilder":
        self._limit = n or 0
        return self

    def filter_by_field(self, field: str, value: Any) -> "FilterBuilder":
        self._filters.append(FieldFilter(field, value))
        return self

    def filter_by_quality(self, *labels: str) -> "FilterBuilder":
        self._filters.append(QualityFilter(labels))
        return self

    def exclude_quality(self, *labels: str) -> "FilterBuilder":
        self._filters.append(QualityFilter(labels, exclude=True))
        return self

    def filter_by_addon(self, addon_name: Optional[str]) -> "FilterBuilder":
        if addon_name:
            self._filters.append(AddonFilter(addon_name))
        return self

    def dedupe_by_infoHash(self) -> "FilterBuilder":
        self.add_filter(DedupeFilter())
        return self

    def add_filter(self, filter: FilterInterface) -> "FilterBuilder":
        self._filters.append(filter)
        return self

    def build(self, items: List[StreamDescriptor]) -> List[StreamDescriptor]:
        self.reset()
        filtered_items = [item for item in items if self.matches(item)]
        sorted_items = self._apply_sorting(filtered_items)
        return self._apply_limit(sorted_items)

    def _apply_sorting(self, items: List[StreamDescriptor]) -> List[StreamDescriptor]:
        if not self._sort_criteria:
            return items

        def sort_key(item):
            key = []
            for field, ascending in self._sort_criteria:
                value = getattr(item, field, None) or 0
                key.append(value if ascending else -value)
            return tuple(key)

        # sorted() is stable: equal keys keep discovery order
        return sorted(items, key=sort_key)

    def _apply_limit(self, items: List[StreamDescriptor]) -> List[StreamDescriptor]:
        return items[: self._limit] if self._limit else items
