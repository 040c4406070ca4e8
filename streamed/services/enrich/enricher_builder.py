import logging
from collections import defaultdict
from typing import Any, Dict, List, Optional

from streamed.domain.interface.enricher_interface import EnricherInterface
from streamed.utils.logger import streamlog


class EnricherBuilder:
    def __init__(self):
        self._enrichers: List[EnricherInterface] = []

    def add(self, enricher: Optional[EnricherInterface]) -> "EnricherBuilder":
        if enricher is None:
            return self

        self._enrichers.append(enricher)
        return self

    def build(self, item: Dict[str, Any]) -> Dict[str, Any]:
        """Run every enricher over a copy of ``item``. An enricher that raises
        is logged and skipped, its fields keep what they had."""
        item = dict(item)
        for enricher in self._enrichers:
            try:
                enricher.enrich(item)
            except Exception as e:
                streamlog(
                    f"{type(enricher).__name__} failed on {item.get('title')!r}: {e}",
                    level=logging.WARNING,
                )
        return item

    def generate_report(self) -> str:
        report = ["Enrichers Report:", "================="]
        provided_fields = defaultdict(list)
        cumulative_provided = set()
        unmet = []

        for enricher in self._enrichers:
            name = type(enricher).__name__
            needs, provides = enricher.needs(), enricher.provides()
            report.append(f"- {name}:")
            report.append(f"  Needs: {', '.join(needs) if needs else 'None'}")
            report.append(f"  Provides: {', '.join(provides) if provides else 'None'}")
            missing = [f for f in needs if f not in cumulative_provided]
            if missing:
                unmet.append((name, missing))
            cumulative_provided.update(provides)
            for field in provides:
                provided_fields[field].append(name)

        report.append("\nInsights:")
        report.append("=========")
        if unmet:
            report.append("Needs not provided by prior enrichers (read from the raw item):")
            for name, missing in unmet:
                report.append(f"   - {name}: {', '.join(missing)}")
        else:
            report.append("All enrichers' dependencies are met by prior enrichers.")

        multi = {f: p for f, p in provided_fields.items() if len(p) > 1}
        if multi:
            report.append("Fields provided by multiple enrichers:")
            for field, providers in multi.items():
                report.append(f"   - Field '{field}' is provided by: {', '.join(providers)}")
        return "\n".join(report)
