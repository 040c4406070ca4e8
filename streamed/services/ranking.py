from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

from streamed.domain.source import RawResult
from streamed.domain.stream_descriptor import StreamDescriptor
from streamed.services.filters import FilterBuilder
from streamed.utils.settings import get_bucket_limit
from streamed.utils.utils import convert_size_to_bytes


class Bucket(Enum):
    FOUR_K = "4K"
    FULL_HD = "1080P"
    EXTRA = "EXTRA"


class SortOrder(Enum):
    HIGH_TO_LOW = "highToLow"
    LOW_TO_HIGH = "lowToHigh"


MAIN_QUALITIES = ("4K", "1080P")


@dataclass
class RankedStreams:
    four_k: List[StreamDescriptor] = field(default_factory=list)
    full_hd: List[StreamDescriptor] = field(default_factory=list)
    extra: List[StreamDescriptor] = field(default_factory=list)
    season_packs: List[StreamDescriptor] = field(default_factory=list)

    def get(self, bucket: Bucket) -> List[StreamDescriptor]:
        return {
            Bucket.FOUR_K: self.four_k,
            Bucket.FULL_HD: self.full_hd,
            Bucket.EXTRA: self.extra,
        }[bucket]


class RankingEngine:
    """Splits parsed streams into quality buckets and a season pack list.

    ``unlimited`` marks results from the indexer that returns everything it
    knows (Zilean): only then is the EXTRA bucket filled, and nothing is capped.
    ``uncapped`` lifts the cap for addon and cached-only listings.
    """

    def __init__(self, bucket_limit: Optional[int] = None):
        self.bucket_limit = bucket_limit or get_bucket_limit()

    def _limit(self, unlimited: bool, uncapped: bool) -> int:
        return 0 if unlimited or uncapped else self.bucket_limit

    def bucket(
        self,
        descriptors: List[StreamDescriptor],
        quality: Union[Bucket, str],
        addon_filter: Optional[str] = None,
        sort_order: SortOrder = SortOrder.HIGH_TO_LOW,
        unlimited: bool = False,
        uncapped: bool = False,
    ) -> List[StreamDescriptor]:
        quality = Bucket(quality)
        if quality == Bucket.EXTRA and not unlimited:
            return []

        builder = FilterBuilder().filter_by_field("is_season_pack", False)
        if quality == Bucket.EXTRA:
            builder.exclude_quality(*MAIN_QUALITIES)
        else:
            builder.filter_by_quality(quality.value)

        return (
            builder.filter_by_addon(addon_filter)
            .dedupe_by_infoHash()
            .sort_by("size", ascending=sort_order == SortOrder.LOW_TO_HIGH)
            .limit(self._limit(unlimited, uncapped))
            .build(descriptors)
        )

    def season_packs(
        self,
        descriptors: List[StreamDescriptor],
        unlimited: bool = False,
        uncapped: bool = False,
    ) -> List[StreamDescriptor]:
        # Largest first whatever the bucket sort order or addon filter
        return (
            FilterBuilder()
            .filter_by_field("is_season_pack", True)
            .dedupe_by_infoHash()
            .sort_by("size", ascending=False)
            .limit(self._limit(unlimited, uncapped))
            .build(descriptors)
        )

    def buckets(
        self,
        descriptors: List[StreamDescriptor],
        addon_filter: Optional[str] = None,
        sort_order: SortOrder = SortOrder.HIGH_TO_LOW,
        unlimited: bool = False,
        uncapped: bool = False,
    ) -> RankedStreams:
        kwargs = dict(
            addon_filter=addon_filter,
            sort_order=sort_order,
            unlimited=unlimited,
            uncapped=uncapped,
        )
        return RankedStreams(
            four_k=self.bucket(descriptors, Bucket.FOUR_K, **kwargs),
            full_hd=self.bucket(descriptors, Bucket.FULL_HD, **kwargs),
            extra=self.bucket(descriptors, Bucket.EXTRA, **kwargs),
            season_packs=self.season_packs(
                descriptors, unlimited=unlimited, uncapped=uncapped
            ),
        )


class SortBy(Enum):
    RELEVANCE = "relevance"
    NAME = "name"
    SIZE = "size"
    SEEDERS = "seeders"
    DATE = "date"


def _result_size(result: RawResult) -> int:
    return result.size_bytes or convert_size_to_bytes(result.size)


def _result_date(result: RawResult) -> int:
    return int(result.date) if result.date and result.date.isdigit() else 0


_SORT_KEYS = {
    SortBy.NAME: (lambda r: r.title.casefold(), False),
    SortBy.SIZE: (_result_size, True),
    SortBy.SEEDERS: (lambda r: r.seeders or 0, True),
    SortBy.DATE: (_result_date, True),
}


def sort_results(
    results: List[RawResult], sort_by: Union[SortBy, str] = SortBy.RELEVANCE
) -> List[RawResult]:
    """Return a sorted copy of ``results``.

    Names sort A to Z, everything else largest, best seeded or newest first.
    Relevance keeps the order the sources answered in.
    """
    sort_by = SortBy(sort_by)
    if sort_by == SortBy.RELEVANCE:
        return list(results)
    key, reverse = _SORT_KEYS[sort_by]
    return sorted(results, key=key, reverse=reverse)
