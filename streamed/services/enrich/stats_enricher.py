import re
from typing import Any, Callable, Dict

from streamed.domain.interface.enricher_interface import EnricherInterface


class StatsEnricher(EnricherInterface):
    def __init__(self, size_converter: Callable):
        self.size_pattern = re.compile(r"💾\s*([\d.]+\s*(?:GB|MB|KB))", re.IGNORECASE)
        self.seeders_pattern = re.compile(r"(?:👤|🌱|S:|Seeders?:?)\s*(\d+)", re.IGNORECASE)
        self.convert_size = size_converter

    def needs(self):
        return ["size_bytes", "size", "description", "seeders"]

    def provides(self):
        return ["size", "seeders"]

    def enrich(self, item: Dict[str, Any]) -> None:
        desc = item.get("description", "")

        # Exact bytes from the source win over any string
        size = item.get("size_bytes")
        if not size:
            size_str = item.get("size", "")
            if not size_str:
                size_match = self.size_pattern.search(desc)
                size_str = size_match.group(1) if size_match else ""
            size = self.convert_size(size_str)
        item["size"] = int(size or 0)

        if not item.get("seeders"):
            seeders_match = self.seeders_pattern.search(desc)
            item["seeders"] = int(seeders_match.group(1)) if seeders_match else 0
