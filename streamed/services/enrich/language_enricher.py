from typing import Any, Dict, List, Pattern, Tuple

from streamed.domain.interface.enricher_interface import EnricherInterface
from streamed.services.enrich.rules import DUAL_LANGUAGE_REGEX, FLAG_REGEX
from streamed.utils.utils import unicode_flag_to_country_code


class LanguageEnricher(EnricherInterface):
    def __init__(self, rules: List[Tuple[Pattern, str]], flag_map: Dict[str, str]):
        self.rules = rules
        self.flag_map = flag_map

    def needs(self):
        return ["text", "languages"]

    def provides(self):
        return ["languages"]

    def enrich(self, item: Dict[str, Any]) -> None:
        text = item.get("text", "")
        languages = set()

        # Codes or names reported by the source
        for lang in item.get("languages") or []:
            code = self._normalize(lang)
            if code:
                languages.add(code)

        for regex, code in self.rules:
            if regex.search(text):
                languages.add(code)

        for flag in FLAG_REGEX.findall(text):
            country = unicode_flag_to_country_code(flag).upper()
            languages.add(self.flag_map.get(country, country))

        dual = DUAL_LANGUAGE_REGEX.search(text)
        if dual:
            languages.update(self.flag_map.get(c, c) for c in dual.groups())

        item["languages"] = frozenset(languages)

    def _normalize(self, lang: str) -> str:
        lang = (lang or "").strip()
        if not lang:
            return ""
        for regex, code in self.rules:
            if regex.fullmatch(lang):
                return code
        return lang.upper()
