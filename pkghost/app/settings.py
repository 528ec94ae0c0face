# pkghost/app/settings.py
from __future__ import annotations
import logging
from functools import lru_cache
from typing import Any, cast

import json5
from pydantic import JsonValue

from pkghost.app.paths import BUILTIN_DIR, userSettingsPath
from pkghost.core.dictpath import getByPath

logger = logging.getLogger(__name__)

__all__ = [
    "SETTINGS", "loadUserSettings", "loadSettings", "reloadSettings",
    "deepMerge", "settings", "settingsBool",
]



SETTINGS: JsonValue = {
    "__source": "PKGHOST_DEFAULTS",
    "packages": {
        "lang": "en",
        "searchPaths": [],
        "builtinRoot": str(BUILTIN_DIR),
        "hostVersions": {},
        "autoload": [],
        "build": {"minify": False, "transpile": False},
    },
    "logging": {"file": "pkghost.log"},
    "debug": {"devModeEnabled": True},
}



def loadUserSettings() -> JsonValue:
    filePath = userSettingsPath()
    if filePath.exists():
        try:
            return json5.loads(filePath.read_text(encoding="utf-8"))
        except Exception as err:
            logger.error("Failed to parse '%s': %s", filePath, err)
    return {}



@lru_cache(maxsize=1)
def loadSettings() -> JsonValue:
    return deepMerge(SETTINGS, loadUserSettings())



def reloadSettings() -> JsonValue:
    """Drops the cached merge so the next access re-reads the user file."""
    loadSettings.cache_clear()
    return loadSettings()



def deepMerge(first: JsonValue, second: JsonValue) -> JsonValue:
    """
    Returns a new JsonValue where keys from `second` override/extend `first`.
    Only merges recursively when BOTH sides are JSON objects (dicts).
    For all other JSON types the right-hand value `second` replaces `first`.
    """
    if isinstance(first, dict) and isinstance(second, dict):
        out: dict[str, JsonValue] = {}
        for key, value in first.items():
            out[key] = cast(JsonValue, value)
        for key, value in second.items():
            if key in out:
                out[key] = deepMerge(out[key], cast(JsonValue, value))
            else:
                out[key] = cast(JsonValue, value)
        return cast(JsonValue, out)

    return cast(JsonValue, second)

# ---------- Ergonomic accessors over merged settings ----------

def settings(path: str, default: Any = None) -> Any:
    """Returns value at `path` from merged settings, or `default` if missing."""
    val = getByPath(loadSettings(), path)
    return default if val is None else val



def settingsBool(path: str, default: bool = False) -> bool:
    """Returns bool value at `path` or `default` if missing."""
    val = getByPath(loadSettings(), path)
    if isinstance(val, bool):
        return val
    if val is None:
        return default
    return bool(val)
