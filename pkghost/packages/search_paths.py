# pkghost/packages/search_paths.py
from __future__ import annotations
import logging
import os
from collections.abc import Iterable
from pathlib import Path

logger = logging.getLogger(__name__)

__all__ = ["SearchPathSet", "normalizePath"]



def normalizePath(path: str | os.PathLike[str]) -> Path:
    """Absolute, normalized path. Symlinks are kept as written."""
    return Path(os.path.abspath(os.path.expanduser(os.fspath(path))))



class SearchPathSet:
    """Ordered, deduplicated directories scanned to resolve a package name."""
    def __init__(self, paths: Iterable[str | os.PathLike[str]] = ()) -> None:
        self._paths: list[Path] = []
        self.add(paths)

    def add(self, paths: str | os.PathLike[str] | Iterable[str | os.PathLike[str]]) -> None:
        if isinstance(paths, (str, os.PathLike)):
            paths = [paths]
        for path in paths:
            normalized = normalizePath(path)
            if normalized not in self._paths:
                self._paths.append(normalized)

    def remove(self, path: str | os.PathLike[str]) -> bool:
        normalized = normalizePath(path)
        try:
            self._paths.remove(normalized)
        except ValueError:
            return False
        return True

    def reset(self) -> None:
        self._paths = []

    def find(self, name: str) -> Path | None:
        """
        First `<searchPath>/<name>` whose search path lists an entry called
        `name`, in registration order. Missing search directories are skipped.
        """
        if not name:
            return None
        for searchPath in self._paths:
            if not searchPath.is_dir():
                continue
            try:
                entries = os.listdir(searchPath)
            except OSError as err:
                logger.debug("Skipping unreadable search path '%s': %s", searchPath, err)
                continue
            if name in entries:
                return searchPath / name
        return None

    @property
    def paths(self) -> list[Path]:
        return list(self._paths)

    def __iter__(self):
        return iter(list(self._paths))

    def __len__(self) -> int:
        return len(self._paths)
