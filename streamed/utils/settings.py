import os
import threading


ENV_PREFIX = "STREAMED_"

DEFAULT_SETTINGS = {
    "source_timeout": "30",
    "debrid_timeout": "15",
    "probe_timeout": "10",
    "bucket_limit": "10",
    "addons_enabled": "true",
    "cached_only": "true",
    "torbox_enabled": "false",
    "torbox_token": "",
    "torrentio_enabled": "true",
    "torrentio_host": "https://torrentio.strem.fun",
    "zilean_enabled": "false",
    "zilean_host": "https://zileanfortheweebs.midnightignite.me",
    "zilean_timeout": "15",
    "torrents_csv_enabled": "true",
    "torrents_csv_max_results": "100",
    "yts_enabled": "true",
    "yts_max_results": "50",
    "pirate_bay_enabled": "true",
    "pirate_bay_max_results": "100",
    "knaben_enabled": "true",
    "knaben_max_results": "100",
    "solid_torrents_enabled": "false",
    "solid_torrents_max_results": "100",
    "stremio_addons": "",
    "stremio_cached_addons": "",
}

_lock = threading.Lock()
_settings = {}


def _load():
    values = dict(DEFAULT_SETTINGS)
    for key, value in os.environ.items():
        if key.startswith(ENV_PREFIX):
            values[key[len(ENV_PREFIX):].lower()] = value
    return values


def reload_settings():
    with _lock:
        _settings.clear()
        _settings.update(_load())


def get_setting(value, default=None):
    with _lock:
        if not _settings:
            _settings.update(_load())
        val = _settings.get(value)
    if not val:
        return default
    if isinstance(val, str):
        if val.lower() == "true":
            return True
        if val.lower() == "false":
            return False
    return val


def set_setting(id, value):
    if isinstance(value, bool):
        value = "true" if value else "false"
    with _lock:
        if not _settings:
            _settings.update(_load())
        _settings[id] = str(value)


def get_int_setting(setting, default=0):
    try:
        return int(get_setting(setting, default))
    except (TypeError, ValueError):
        return default


def get_list_setting(setting):
    value = get_setting(setting, "")
    if not value or not isinstance(value, str):
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def get_source_timeout():
    return get_int_setting("source_timeout", 30)


def get_debrid_timeout():
    return get_int_setting("debrid_timeout", 15)


def get_probe_timeout():
    return get_int_setting("probe_timeout", 10)


def get_bucket_limit():
    return get_int_setting("bucket_limit", 10)


def get_torbox_token():
    return get_setting("torbox_token", "")


def is_torbox_enabled():
    return bool(get_setting("torbox_enabled") and get_torbox_token())


def addons_enabled():
    return bool(get_setting("addons_enabled", True))
