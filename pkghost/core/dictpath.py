# pkghost/core/dictpath.py
from __future__ import annotations
import re
from collections.abc import Mapping
from typing import Any

__all__ = ["splitPath", "getByPath", "hasPath"]



_MISSING = object()

# escape pair | separator | run of plain characters
_TOKEN_RE = re.compile(r"\\.?|\.|[^.\\]+", re.DOTALL)



def splitPath(path: str) -> list[str]:
    """
    Splits a dotted path where '.' is the segment separator and backslash
    escapes the next character (including separators).

    Examples:
      - a.b.c   -> ["a", "b", "c"]
      - a\\.b.c -> ["a.b", "c"]

    Raises ValueError for empty paths, empty segments and dangling escapes.
    """
    if not isinstance(path, str) or not path:
        raise ValueError("Path must be a non-empty string")
    parts: list[str] = []
    segment = ""
    for token in _TOKEN_RE.findall(path):
        if token == ".":
            parts.append(segment)
            segment = ""
        elif token == "\\":
            raise ValueError("Path ends with a dangling escape (trailing backslash)")
        elif token[0] == "\\":
            segment += token[1]
        else:
            segment += token
    parts.append(segment)

    if "" in parts:
        raise ValueError(f"Path '{path}' contains empty segment(s)")
    return parts



def _asMapping(obj: Any) -> Mapping[str, Any] | None:
    if isinstance(obj, Mapping):
        return obj
    # Pydantic BaseModel (v2) - read-only view via dump
    if hasattr(obj, "model_dump"):
        try:
            return obj.model_dump(by_alias=True)
        except Exception:
            return None
    return None



def _resolve(obj: Any, path: str) -> Any:
    try:
        parts = splitPath(path)
    except ValueError:
        # Invalid path is treated as "not found"
        return _MISSING

    current: Any = obj
    for part in parts:
        mapping = _asMapping(current)
        if mapping is None or part not in mapping:
            return _MISSING
        current = mapping[part]
    return current



def getByPath(obj: Any, path: str, default: Any | None = None) -> Any:
    """
    Returns the value at dotted `path` inside nested mappings, or `default`
    when any hop is missing or the path is invalid.
    """
    value = _resolve(obj, path)
    return default if value is _MISSING else value



def hasPath(obj: Any, path: str) -> bool:
    return _resolve(obj, path) is not _MISSING
