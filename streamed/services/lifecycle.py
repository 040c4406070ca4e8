import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import requests

from streamed.clients.exceptions import (
    AuthError,
    NetworkError,
    ProviderException,
    ResolveError,
)
from streamed.domain.search import WatchResumeProbe
from streamed.services.cache_resolver import CacheResolver
from streamed.utils.logger import streamlog
from streamed.utils.settings import get_probe_timeout
from streamed.utils.utils import USER_AGENT_HEADER


class RevalidationStatus(Enum):
    VALID = "Valid"
    EXPIRED = "Expired"


class ExpiryReason:
    REMOVED_FROM_LIBRARY = "removed_from_library"
    NOT_READY = "not_ready"
    AUTH = "auth"
    NETWORK = "network"
    STATUS = "status"


@dataclass
class RevalidationResult:
    status: RevalidationStatus
    url: Optional[str] = None
    reason: Optional[str] = None
    detail: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return self.status == RevalidationStatus.VALID

    @classmethod
    def valid(cls, url: str) -> "RevalidationResult":
        return cls(RevalidationStatus.VALID, url=url)

    @classmethod
    def expired(cls, reason: str, detail: Optional[str] = None) -> "RevalidationResult":
        return cls(RevalidationStatus.EXPIRED, reason=reason, detail=detail)


def _reason_for(error: ProviderException) -> str:
    if isinstance(error, AuthError):
        return ExpiryReason.AUTH
    if isinstance(error, NetworkError):
        return ExpiryReason.NETWORK
    if isinstance(error, ResolveError) and error.not_ready:
        return ExpiryReason.NOT_READY
    return ExpiryReason.STATUS


class StreamLifecycleManager:
    """Decides whether a stored playback target can still be served.

    Debrid links expire silently, so a stored URL for a hash is never reused:
    the library is checked and a fresh link resolved. Direct URLs are probed
    with a one-byte ranged HEAD.
    """

    def __init__(
        self,
        resolver: Optional[CacheResolver],
        session: Optional[requests.Session] = None,
        timeout: Optional[int] = None,
    ):
        self.resolver = resolver
        self.session = session or requests.Session()
        self.timeout = timeout or get_probe_timeout()

    def revalidate(self, probe: WatchResumeProbe) -> RevalidationResult:
        if probe.is_debrid:
            result = self._revalidate_debrid(probe)
        elif probe.url:
            result = self._probe_url(probe.url)
        else:
            result = RevalidationResult.expired(
                ExpiryReason.STATUS, "Nothing to revalidate"
            )
        if not result.is_valid:
            streamlog(
                f"Resume target expired: {result.reason} {result.detail or ''}",
                level=logging.WARNING,
            )
        return result

    def _revalidate_debrid(self, probe: WatchResumeProbe) -> RevalidationResult:
        if self.resolver is None:
            return RevalidationResult.expired(
                ExpiryReason.AUTH, "No debrid account configured"
            )
        try:
            entry = self.resolver.check_library(probe.info_hash)
        except ProviderException as e:
            return RevalidationResult.expired(_reason_for(e), e.message)

        if entry is None:
            return RevalidationResult.expired(
                ExpiryReason.REMOVED_FROM_LIBRARY,
                f"{probe.info_hash} is no longer in the library",
            )

        try:
            url = self.resolver.resolve_url(entry, probe.file_index)
        except ProviderException as e:
            return RevalidationResult.expired(_reason_for(e), e.message)
        return RevalidationResult.valid(url)

    def _probe_url(self, url: str) -> RevalidationResult:
        headers = {**USER_AGENT_HEADER, "Range": "bytes=0-0"}
        try:
            res = self.session.head(
                url, headers=headers, timeout=self.timeout, allow_redirects=True
            )
        except requests.exceptions.RequestException as e:
            return RevalidationResult.expired(ExpiryReason.NETWORK, str(e))

        if 200 <= res.status_code < 300:
            return RevalidationResult.valid(url)
        return RevalidationResult.expired(ExpiryReason.STATUS, f"HTTP {res.status_code}")
