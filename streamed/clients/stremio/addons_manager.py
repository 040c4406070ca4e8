import json
import re
from typing import List, Optional

import requests

from streamed.clients.exceptions import NetworkError, ParseError
from streamed.utils.utils import JSON_HEADERS


class Resource:
    def __init__(
        self, name: str, types: List[str], id_prefixes: Optional[List[str]] = None
    ):
        self.name = name
        self.types = types
        self.id_prefixes = id_prefixes or []


class Manifest:
    def __init__(
        self,
        id: str,
        version: str,
        name: str,
        description: str,
        resources: List[Resource],
        types: List[str],
        behavior_hints: dict,
        id_prefixes: Optional[List[str]] = None,
    ):
        self.id = id
        self.version = version
        self.name = name
        self.description = description
        self.resources = resources
        self.types = types
        self.behavior_hints = behavior_hints
        self.id_prefixes = id_prefixes or []

    def isConfigurationRequired(self):
        return self.behavior_hints.get("configurationRequired", False)

    @classmethod
    def from_dict(cls, data: dict, manifest_url: str = "") -> "Manifest":
        types = data.get("types", [])
        id_prefixes = data.get("idPrefixes", [])
        resources = [
            (
                Resource(name=resource, types=types, id_prefixes=[])
                if isinstance(resource, str)
                else Resource(
                    name=resource.get("name", ""),
                    types=resource.get("types", types),
                    id_prefixes=resource.get("idPrefixes", []),
                )
            )
            for resource in data.get("resources", [])
        ]
        return cls(
            id=data.get("id") or generate_addon_id(manifest_url),
            version=data.get("version", ""),
            name=data.get("name", "Unknown"),
            description=data.get("description", ""),
            resources=resources,
            types=types,
            behavior_hints=data.get("behaviorHints", {}),
            id_prefixes=id_prefixes,
        )


class Addon:
    def __init__(self, transport_url: str, manifest: Manifest, cached: bool = False):
        self.transport_url = transport_url
        self.manifest = manifest
        # Addon configured with a debrid key, only returns cached streams
        self.cached = cached

    def url(self):
        base_url = self.transport_url.split("?")[0]
        base_url = re.sub(r"manifest\.json$", "", base_url, flags=re.IGNORECASE)
        base_url = base_url.rstrip("/")
        if not base_url.startswith("http"):
            base_url = f"https://{base_url}"
        return base_url

    def query(self):
        parts = self.transport_url.split("?", 1)
        return parts[1] if len(parts) > 1 else ""

    def key(self):
        return self.manifest.id

    def isSupported(self, resource_name: str, id: str) -> bool:
        """Loose check: a stream resource is required, id prefixes are honoured
        only when the addon declares them."""
        resources = [r for r in self.manifest.resources if r.name == resource_name]
        if not resources:
            return False
        if self.manifest.id_prefixes and not any(
            id.startswith(p) for p in self.manifest.id_prefixes
        ):
            return False
        for resource in resources:
            if resource.id_prefixes and not any(
                id.startswith(p) for p in resource.id_prefixes
            ):
                return False
        return True


def generate_addon_id(url: str) -> str:
    return re.sub(r"[^a-zA-Z0-9]", "-", url).lower()[:50]


def manifest_url(url: str) -> str:
    if url.split("?")[0].endswith("manifest.json"):
        return url
    return f"{url.rstrip('/')}/manifest.json"


def fetch_addon(
    url: str, session: Optional[requests.Session] = None, timeout: int = 15, cached=False
) -> Addon:
    if not url.startswith(("http://", "https://")):
        raise ParseError("Invalid URL: Must be an HTTP or HTTPS URL")

    session = session or requests.Session()
    url = manifest_url(url)
    try:
        res = session.get(url, headers=JSON_HEADERS, timeout=timeout)
        res.raise_for_status()
        data = res.json()
    except requests.exceptions.RequestException as e:
        raise NetworkError(f"Failed to fetch addon manifest: {e}")
    except ValueError as e:
        raise ParseError(f"Invalid addon manifest: {e}")
    return Addon(url, Manifest.from_dict(data, url), cached=cached)


def load_addons(src) -> List[Addon]:
    """Addons from a stored JSON list of {"transportUrl", "manifest"} items."""
    if isinstance(src, str):
        src = json.loads(src)
    return [
        Addon(
            item["transportUrl"],
            Manifest.from_dict(item["manifest"], item["transportUrl"]),
            cached=item.get("cached", False),
        )
        for item in src
    ]
