import logging
from typing import Any, Dict, List, Optional

import requests

from streamed.clients.debrid.base import DebridClient
from streamed.clients.exceptions import (
    AuthError,
    NotFoundError,
    ProviderException,
    RateLimitError,
    ResolveError,
)
from streamed.domain.cached_source import CachedSource
from streamed.domain.interface.cache_provider_interface import CacheProviderInterface
from streamed.utils.logger import streamlog
from streamed.utils.utils import USER_AGENT_HEADER, is_magnet_link, info_hash_to_magnet

AUTH_ERRORS = {"BAD_TOKEN", "AUTH_ERROR", "NO_AUTH", "OAUTH_VERIFICATION_ERROR"}
QUOTA_ERRORS = {"ACTIVE_LIMIT", "MONTHLY_LIMIT", "COOLDOWN_LIMIT"}
NOT_FOUND_ERRORS = {"ITEM_NOT_FOUND"}


class Torbox(DebridClient, CacheProviderInterface):
    BASE_URL = "https://api.torbox.app/v1/api"
    name = "TorBox"

    def __init__(self, token, timeout=15, session=None):
        if session is None:
            session = requests.Session()
            adapter = requests.adapters.HTTPAdapter(max_retries=1)
            session.mount("https://", adapter)
        super().__init__(token, timeout, session)

    def initialize_headers(self):
        self.headers = {**USER_AGENT_HEADER, "Accept": "application/json"}
        if self.token:
            self.headers["Authorization"] = f"Bearer {self.token}"

    def _handle_service_specific_errors(self, error_data: dict, status_code: int):
        error_code = error_data.get("error")
        if error_code in AUTH_ERRORS:
            raise AuthError("Invalid Torbox token", status_code, error_data)
        elif error_code == "DOWNLOAD_TOO_LARGE":
            raise RateLimitError(
                "Download size too large for the user plan", status_code, error_data
            )
        elif error_code in QUOTA_ERRORS:
            raise RateLimitError("Download limit exceeded", status_code, error_data)
        elif error_code in NOT_FOUND_ERRORS:
            raise NotFoundError("Torrent not found", status_code, error_data)
        elif error_code in {"DOWNLOAD_SERVER_ERROR", "DATABASE_ERROR"}:
            raise ProviderException("Torbox server error", status_code, error_data)

    def _make_request(
        self,
        method,
        url,
        data=None,
        params=None,
        json=None,
        is_return_none=False,
        is_expected_to_fail=False,
    ):
        params = params or {}
        url = self.BASE_URL + url
        return super()._make_request(
            method,
            url,
            data=data,
            params=params,
            json=json,
            is_return_none=is_return_none,
            is_expected_to_fail=is_expected_to_fail,
        )

    def add_magnet_link(self, magnet_link: str) -> Dict[str, Any]:
        """Push a magnet (or bare hash) into the library. Returns the created
        item's ``torrent_id``, ``hash`` and ``name``."""
        if not is_magnet_link(magnet_link):
            magnet_link = info_hash_to_magnet(magnet_link)
        response = self._make_request(
            "POST",
            "/torrents/createtorrent",
            data={"magnet": magnet_link},
        )
        if not response.get("success"):
            self._handle_service_specific_errors(response, 200)
            raise ProviderException(
                f"Failed to add magnet link: {response.get('detail')}",
                error_content=response,
            )
        return response.get("data") or {}

    def get_user_torrent_list(self) -> List[Dict[str, Any]]:
        try:
            response = self._make_request(
                "GET",
                "/torrents/mylist",
                params={"bypass_cache": "true"},
            )
        except NotFoundError:
            # An empty library answers 404
            return []
        return response.get("data") or []

    def get_torrent(self, torrent_id) -> Optional[Dict[str, Any]]:
        try:
            response = self._make_request(
                "GET",
                "/torrents/mylist",
                params={"bypass_cache": "true", "id": torrent_id},
            )
        except NotFoundError:
            return None
        data = response.get("data")
        if isinstance(data, list):
            data = data[0] if data else None
        return data

    def get_available_torrent(self, info_hash: str) -> Optional[Dict[str, Any]]:
        info_hash = info_hash.lower()
        for torrent in self.get_user_torrent_list():
            if (torrent.get("hash") or "").lower() == info_hash:
                return torrent
        return None

    def get_torrent_instant_availability(self, torrent_hashes: List[str]):
        return self._make_request(
            "POST",
            "/torrents/checkcached",
            params={"format": "object"},
            json={"hashes": torrent_hashes},
        )

    def get_cached_hashes(self, info_hashes: List[str]) -> Dict[str, CachedSource]:
        hashes = list(dict.fromkeys(h.lower() for h in info_hashes if h))
        if not hashes:
            return {}
        response = self.get_torrent_instant_availability(hashes)
        data = response.get("data") or {}
        cached = {}
        for info_hash in hashes:
            item = data.get(info_hash)
            if not item:
                continue
            details = item if isinstance(item, dict) else {}
            cached[info_hash] = CachedSource(
                hash=info_hash,
                cache_provider_name=self.name,
                instant_availability=True,
                name=details.get("name", ""),
                size=details.get("size", 0),
            )
        streamlog(
            f"TorBox: {len(cached)} of {len(hashes)} hashes cached",
            level=logging.DEBUG,
        )
        return cached

    def create_download_link(self, torrent_id, file_id=None, user_ip=None) -> str:
        params = {"token": self.token, "torrent_id": torrent_id}
        if file_id is not None:
            params["file_id"] = file_id
        if user_ip:
            params["user_ip"] = user_ip

        response = self._make_request(
            "GET",
            "/torrents/requestdl",
            params=params,
            is_expected_to_fail=True,
        )
        if response.get("success") and response.get("data"):
            return response["data"]

        error_code = response.get("error")
        if error_code in AUTH_ERRORS:
            raise AuthError("Invalid Torbox token", error_content=response)
        detail = response.get("detail", "Unknown error")
        raise ResolveError(
            f"Failed to create download link: {detail}",
            error_content=response,
            not_ready=error_code not in NOT_FOUND_ERRORS,
        )

    def delete_torrent(self, torrent_id):
        self._make_request(
            "POST",
            "/torrents/controltorrent",
            json={"torrent_id": torrent_id, "operation": "delete"},
            is_return_none=True,
        )

    def get_user(self) -> Dict[str, Any]:
        return self._make_request("GET", "/user/me").get("data") or {}
