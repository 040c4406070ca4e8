from typing import Any, Dict, Optional

from streamed.domain.source import RawResult
from streamed.domain.stream_descriptor import StreamDescriptor
from streamed.services.enrich import (
    CachedEnricher,
    EnricherBuilder,
    IsPackEnricher,
    LanguageEnricher,
    QualityEnricher,
    StatsEnricher,
    TokenEnricher,
)
from streamed.services.enrich.rules import (
    AUDIO_RULES,
    CODEC_RULES,
    FLAG_LANGUAGES,
    HDR_RULES,
    LANGUAGE_RULES,
    SOURCE_TYPE_RULES,
)
from streamed.utils.utils import convert_size_to_bytes, normalize_info_hash


def default_enricher_builder() -> EnricherBuilder:
    return (
        EnricherBuilder()
        .add(QualityEnricher())
        .add(TokenEnricher("codec", CODEC_RULES))
        .add(TokenEnricher("hdr", HDR_RULES))
        .add(TokenEnricher("audio", AUDIO_RULES))
        .add(TokenEnricher("source_type", SOURCE_TYPE_RULES))
        .add(LanguageEnricher(LANGUAGE_RULES, FLAG_LANGUAGES))
        .add(StatsEnricher(convert_size_to_bytes))
        .add(IsPackEnricher())
        .add(CachedEnricher())
    )


class MetadataParser:
    """Turns a raw search result into a StreamDescriptor.

    Parsing is a pure function of its input: the same RawResult always gives
    the same descriptor, and a failing enricher only leaves its field empty.
    """

    def __init__(self, builder: Optional[EnricherBuilder] = None):
        self.builder = builder or default_enricher_builder()

    def parse(self, raw: RawResult) -> StreamDescriptor:
        fields = {
            "source": raw.source,
            "description": raw.description,
            "addon_name": raw.addon_name,
            "size": raw.size,
            "size_bytes": raw.size_bytes,
            "seeders": raw.seeders,
            "languages": raw.languages,
            "info_hash": raw.info_hash,
            "url": raw.url,
            "file_index": raw.file_index,
            "is_cached": raw.is_cached,
            "is_direct_url": raw.is_direct_url,
        }
        return self.parse_title(raw.title, fields)

    def parse_title(
        self, raw_title: str, raw_fields: Optional[Dict[str, Any]] = None
    ) -> StreamDescriptor:
        item = dict(raw_fields or {})
        item["title"] = raw_title or ""
        item["text"] = "\n".join(
            part for part in (item["title"], item.get("description") or "") if part
        )
        item = self.builder.build(item)

        size = item.get("size")
        return StreamDescriptor(
            title=item["title"],
            source=item.get("source") or "",
            info_hash=normalize_info_hash(item.get("info_hash")),
            url=item.get("url") or "",
            file_index=item.get("file_index"),
            quality=item.get("quality") or "Other",
            quality_sort=item.get("quality_sort") or 0,
            codec=item.get("codec"),
            hdr=item.get("hdr"),
            audio=item.get("audio"),
            source_type=item.get("source_type"),
            languages=frozenset(item.get("languages") or ()),
            size=size if isinstance(size, int) else 0,
            seeders=int(item.get("seeders") or 0),
            addon_name=item.get("addon_name") or "",
            is_season_pack=bool(item.get("is_season_pack")),
            is_cached=bool(item.get("is_cached")),
            is_direct_url=bool(item.get("is_direct_url")),
        )
