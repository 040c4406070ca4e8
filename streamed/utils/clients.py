import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import requests

from streamed.clients.base import BaseClient
from streamed.clients.debrid.torbox import Torbox
from streamed.clients.engines.knaben import Knaben
from streamed.clients.engines.pirate_bay import PirateBay
from streamed.clients.engines.solid_torrents import SolidTorrents
from streamed.clients.engines.torrents_csv import TorrentsCsv
from streamed.clients.engines.yts import Yts
from streamed.clients.exceptions import ProviderException
from streamed.clients.stremio.addons_manager import fetch_addon
from streamed.clients.stremio.stremio import StremioAddonClient
from streamed.clients.torrentio import Torrentio
from streamed.clients.zilean import Zilean
from streamed.domain.search import SourceSettings
from streamed.utils.logger import streamlog
from streamed.utils.settings import (
    addons_enabled,
    get_debrid_timeout,
    get_int_setting,
    get_list_setting,
    get_setting,
    get_source_timeout,
    get_torbox_token,
    is_torbox_enabled,
    set_setting,
)

KEYWORD_ENGINES = [TorrentsCsv, Yts, PirateBay, Knaben, SolidTorrents]


@dataclass
class Sources:
    clients: List[BaseClient] = field(default_factory=list)
    settings: List[SourceSettings] = field(default_factory=list)
    torbox: Optional[Torbox] = None

    def add(self, client: BaseClient, max_results: Optional[int] = None) -> None:
        # The same addon may be installed twice, e.g. with another config
        base_id, n = client.id, 2
        while self.client(client.id) is not None:
            client.id = f"{base_id}#{n}"
            n += 1
        self.clients.append(client)
        self.settings.append(SourceSettings(id=client.id, max_results=max_results))

    def client(self, source_id: str) -> Optional[BaseClient]:
        return next((c for c in self.clients if c.id == source_id), None)


def validate_host(host: Optional[str], name: str) -> bool:
    if not host:
        streamlog(f"Missing host for {name}", level=logging.WARNING)
        return False
    return True


def get_torbox_client() -> Optional[Torbox]:
    if not is_torbox_enabled():
        return None
    return Torbox(get_torbox_token(), timeout=get_debrid_timeout())


def load_stremio_addons(session: requests.Session) -> List[StremioAddonClient]:
    clients = []
    addon_urls = [(url, False) for url in get_list_setting("stremio_addons")]
    addon_urls += [(url, True) for url in get_list_setting("stremio_cached_addons")]
    for url, cached in addon_urls:
        try:
            addon = fetch_addon(url, session=session, cached=cached)
        except ProviderException as e:
            streamlog(f"Skipping addon {url}: {e}", level=logging.WARNING)
            continue
        clients.append(StremioAddonClient(addon, session=session))
    return clients


def build_sources(settings: Optional[Dict[str, str]] = None) -> Sources:
    """Create every enabled source client from the settings store.

    ``settings`` are written to the store first, as the collaborator layer
    would after a settings change.
    """
    for key, value in (settings or {}).items():
        set_setting(key, value)

    sources = Sources(torbox=get_torbox_client())
    token = get_torbox_token() if sources.torbox else None
    timeout = get_source_timeout()

    if addons_enabled():
        for client in load_stremio_addons(requests.Session()):
            sources.add(client)

    if get_setting("torrentio_enabled"):
        host = get_setting("torrentio_host")
        if validate_host(host, "Torrentio"):
            sources.add(
                Torrentio(host, token, cache_provider=sources.torbox, timeout=timeout)
            )

    if get_setting("zilean_enabled"):
        host = get_setting("zilean_host")
        if validate_host(host, "Zilean"):
            sources.add(
                Zilean(
                    host,
                    timeout=get_int_setting("zilean_timeout", timeout),
                    cache_provider=sources.torbox,
                )
            )

    for engine in KEYWORD_ENGINES:
        if get_setting(f"{engine.id}_enabled"):
            sources.add(
                engine(timeout=timeout),
                max_results=get_int_setting(f"{engine.id}_max_results", 0) or None,
            )

    streamlog(f"Built {len(sources.clients)} sources: {[c.id for c in sources.clients]}")
    return sources
