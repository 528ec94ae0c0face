# pkghost/host/menu.py
from __future__ import annotations
import logging
from pathlib import PurePosixPath
from typing import Any, Protocol

logger = logging.getLogger(__name__)

__all__ = ["MenuService", "MainMenu"]



class MenuService(Protocol):
    def add(self, parentPath: str, template: dict[str, Any]) -> bool: ...
    def remove(self, path: str) -> bool: ...



class MainMenu:
    """
    In-process application menu.

    Items are addressed by slash-separated paths ("File/Open"). Adding an
    item under a missing parent creates the intermediate submenus, the same
    way the host's native menu does. Those submenus go away again with the
    last item removed from under them.
    """
    def __init__(self) -> None:
        # path -> template; submenus are stored with {"submenu": True}
        self._items: dict[str, dict[str, Any]] = {}
        # submenus created implicitly by add(), pruned by remove() once empty
        self._implicit: set[str] = set()

    def add(self, parentPath: str, template: dict[str, Any]) -> bool:
        label = template.get("label")
        if not isinstance(label, str) or not label:
            logger.warning("Failed to add menu under '%s': template has no label", parentPath)
            return False

        path = str(PurePosixPath(parentPath) / label)
        if path in self._items:
            logger.warning("Failed to add menu '%s': already exists", path)
            return False

        parent = PurePosixPath(parentPath)
        for ancestor in reversed([parent, *parent.parents]):
            key = str(ancestor)
            if key in (".", "/") or key in self._items:
                continue
            self._items[key] = {"label": ancestor.name, "submenu": True}
            self._implicit.add(key)

        self._items[path] = dict(template)
        return True

    def remove(self, path: str) -> bool:
        if path not in self._items:
            return False
        prefix = path + "/"
        for key in [key for key in self._items if key == path or key.startswith(prefix)]:
            del self._items[key]
            self._implicit.discard(key)
        self._pruneImplicit(PurePosixPath(path).parent)
        return True

    def _pruneImplicit(self, parent: PurePosixPath) -> None:
        for ancestor in [parent, *parent.parents]:
            key = str(ancestor)
            if key not in self._implicit or self._hasChildren(key):
                return
            del self._items[key]
            self._implicit.discard(key)

    def _hasChildren(self, path: str) -> bool:
        prefix = path + "/"
        return any(key.startswith(prefix) for key in self._items)

    def get(self, path: str) -> dict[str, Any] | None:
        return self._items.get(path)

    def has(self, path: str) -> bool:
        return path in self._items

    def paths(self) -> list[str]:
        return sorted(self._items)

    def snapshot(self) -> dict[str, dict[str, Any]]:
        return {key: dict(value) for key, value in self._items.items()}
