from typing import TypedDict


class CachedSource(TypedDict, total=False):
    hash: str
    cache_provider_name: str
    instant_availability: bool
    name: str
    size: int
