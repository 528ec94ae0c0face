# pkghost/core/jsonutils.py
from __future__ import annotations

import json
from enum import Enum
from pathlib import PurePath
from typing import Any

__all__ = ["safeJsonDumps", "jsonFallback"]



def jsonFallback(obj: Any) -> Any:
    """
    `default=` hook for json.dumps. Log records carry paths, warning codes
    and manifests; anything else is rendered with repr() so logging never raises.
    """
    if isinstance(obj, PurePath):
        return str(obj)
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (set, frozenset, tuple)):
        return list(obj)
    if hasattr(obj, "model_dump") and not isinstance(obj, type):
        try:
            return obj.model_dump(by_alias=True, mode="json")
        except Exception:
            return repr(obj)
    return repr(obj)



def safeJsonDumps(obj: object) -> str:
    """Compact JSON for log lines; unknown objects go through jsonFallback()."""
    return json.dumps(obj, ensure_ascii=False, separators=(",", ":"), default=jsonFallback)
