# pkghost/host/i18n.py
from __future__ import annotations
import copy
from collections.abc import Iterable, Mapping
from typing import Any, Protocol

from pkghost.app.settings import deepMerge
from pkghost.core.dictpath import getByPath

__all__ = ["LocalizationService", "I18nTable", "I18N_PREFIX"]



I18N_PREFIX = "i18n:"



class LocalizationService(Protocol):
    def extend(self, fragment: Mapping[str, Any]) -> None: ...
    def unset(self, keys: Iterable[str]) -> None: ...
    def formatPath(self, path: str) -> str: ...



class I18nTable:
    """
    Phrase table keyed by owner at the top level ({"my-package": {"menu": {"open": "Open"}}}).

    Paths and labels may reference phrases with the "i18n:" prefix, e.g.
    "i18n:my-package.menu.open". Unknown keys render as the key itself.
    """
    def __init__(self, phrases: Mapping[str, Any] | None = None) -> None:
        self._phrases: dict[str, Any] = copy.deepcopy(dict(phrases or {}))

    def extend(self, fragment: Mapping[str, Any]) -> None:
        merged = deepMerge(self._phrases, copy.deepcopy(dict(fragment)))
        assert isinstance(merged, dict)
        self._phrases = merged

    def unset(self, keys: Iterable[str]) -> None:
        for key in keys:
            self._phrases.pop(key, None)

    def has(self, key: str) -> bool:
        return key in self._phrases

    def t(self, key: str, default: str | None = None) -> str:
        value = getByPath(self._phrases, key)
        if isinstance(value, str):
            return value
        return default if default is not None else key

    def format(self, text: str) -> str:
        if text.startswith(I18N_PREFIX):
            return self.t(text[len(I18N_PREFIX):])
        return text

    def formatPath(self, path: str) -> str:
        return "/".join(self.format(segment) for segment in path.split("/"))

    def snapshot(self) -> dict[str, Any]:
        return copy.deepcopy(self._phrases)
