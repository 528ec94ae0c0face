# pkghost/packages/tables.py
from __future__ import annotations
import logging
from pathlib import Path
from typing import Any

from pkghost.packages.types import LoadedPackage

logger = logging.getLogger(__name__)

__all__ = ["PackageTable", "PanelRegistry"]



class PackageTable:
    """
    Source of truth for "is this package loaded".

    - byPath: sourcePath -> LoadedPackage
    - nameToPath: manifest name -> sourcePath (last insert wins)
    """
    def __init__(self) -> None:
        self._byPath: dict[Path, LoadedPackage] = {}
        self._nameToPath: dict[str, Path] = {}

    def insert(self, pkg: LoadedPackage) -> None:
        previous = self._nameToPath.get(pkg.name)
        if previous is not None and previous != pkg.sourcePath:
            logger.warning(
                "Package name '%s' now points to '%s' (was '%s')",
                pkg.name, pkg.sourcePath, previous,
            )
        self._byPath[pkg.sourcePath] = pkg
        self._nameToPath[pkg.name] = pkg.sourcePath

    def remove(self, path: Path) -> LoadedPackage | None:
        pkg = self._byPath.pop(Path(path), None)
        if pkg is None:
            return None
        # Another path may have claimed the name since; leave that entry alone.
        if self._nameToPath.get(pkg.name) == pkg.sourcePath:
            del self._nameToPath[pkg.name]
        return pkg

    def get(self, path: Path) -> LoadedPackage | None:
        return self._byPath.get(Path(path))

    def pathForName(self, name: str) -> Path | None:
        return self._nameToPath.get(name)

    def getByName(self, name: str) -> LoadedPackage | None:
        path = self._nameToPath.get(name)
        return self._byPath.get(path) if path is not None else None

    def containing(self, path: Path) -> LoadedPackage | None:
        """Loaded package whose sourcePath is the longest prefix of `path`."""
        path = Path(path)
        best: LoadedPackage | None = None
        for sourcePath, pkg in self._byPath.items():
            if path == sourcePath or path.is_relative_to(sourcePath):
                if best is None or len(sourcePath.parts) > len(best.sourcePath.parts):
                    best = pkg
        return best

    def paths(self) -> list[Path]:
        return list(self._byPath)

    def values(self) -> list[LoadedPackage]:
        return list(self._byPath.values())

    def __contains__(self, path: object) -> bool:
        return isinstance(path, (str, Path)) and Path(path) in self._byPath

    def __len__(self) -> int:
        return len(self._byPath)



class PanelRegistry:
    """panelId ("packageName.panelName") -> panel descriptor."""
    def __init__(self) -> None:
        self._panels: dict[str, dict[str, Any]] = {}

    def register(self, panelId: str, info: dict[str, Any]) -> bool:
        """Returns False (and keeps the existing entry) on collision."""
        if panelId in self._panels:
            return False
        self._panels[panelId] = info
        return True

    def unregister(self, panelId: str) -> bool:
        return self._panels.pop(panelId, None) is not None

    def get(self, panelId: str) -> dict[str, Any] | None:
        return self._panels.get(panelId)

    def ids(self) -> list[str]:
        return list(self._panels)

    def __contains__(self, panelId: object) -> bool:
        return panelId in self._panels

    def __len__(self) -> int:
        return len(self._panels)
