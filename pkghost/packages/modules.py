# pkghost/packages/modules.py
from __future__ import annotations
import hashlib
import importlib.util
import logging
import re
import sys
import types
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger(__name__)

__all__ = ["PACKAGES_NAMESPACE", "ModuleLoader", "ModuleNode", "ModuleGraph"]



# Every package gets a synthetic parent package under this name so that
# relative imports inside the package resolve against its own directory.
PACKAGES_NAMESPACE = "_pkghost_packages"



class ModuleLoader(Protocol):
    def load(self, path: Path, *, packageRoot: Path | None = None) -> Any: ...
    def get(self, path: Path) -> Any | None: ...
    def children(self, path: Path) -> list[Path]: ...
    def evict(self, path: Path, prefix: Path) -> bool: ...
    def __contains__(self, path: object) -> bool: ...



@dataclass
class ModuleNode:
    path: Path
    name: str
    module: types.ModuleType
    package: str
    children: list[Path] = field(default_factory=list)



def _packageModuleName(packageRoot: Path) -> str:
    slug = re.sub(r"\W", "_", packageRoot.name) or "pkg"
    digest = hashlib.sha1(str(packageRoot).encode("utf-8")).hexdigest()[:10]
    return f"{PACKAGES_NAMESPACE}.{slug}_{digest}"



def _moduleFile(module: Any) -> Path | None:
    fileName = getattr(module, "__file__", None)
    if not fileName:
        return None
    return Path(fileName).absolute()



class ModuleGraph:
    """
    Module cache owned by the package system.

    load() executes a file and records every module that first appeared in
    sys.modules while it ran as one of its children. evict() removes a module
    and (recursively) those children living under a given prefix.
    """
    def __init__(self) -> None:
        self._nodes: dict[Path, ModuleNode] = {}

    def load(self, path: Path, *, packageRoot: Path | None = None) -> types.ModuleType:
        path = Path(path).absolute()
        if not path.is_file():
            raise FileNotFoundError(f"Module file not found: '{path}'")
        packageRoot = Path(packageRoot).absolute() if packageRoot is not None else path.parent

        existing = self._nodes.get(path)
        if existing is not None:
            return existing.module

        packageName = self._ensurePackage(packageRoot)
        moduleName = self._moduleName(path, packageRoot, packageName)

        spec = importlib.util.spec_from_file_location(moduleName, path)
        if spec is None or spec.loader is None:
            raise ImportError(f"Could not load module from {path}")
        module = importlib.util.module_from_spec(spec)

        before = set(sys.modules)
        sys.modules[moduleName] = module
        try:
            spec.loader.exec_module(module)
        except BaseException:
            for name in set(sys.modules) - before:
                sys.modules.pop(name, None)
            self._dropPackageIfUnused(packageName)
            raise

        node = ModuleNode(path=path, name=moduleName, module=module, package=packageName)
        for name in sorted(set(sys.modules) - before - {moduleName}):
            child = sys.modules.get(name)
            childPath = _moduleFile(child)
            if childPath is None or childPath == path:
                continue
            node.children.append(childPath)
            if childPath.is_relative_to(packageRoot) and childPath not in self._nodes:
                self._nodes[childPath] = ModuleNode(path=childPath, name=name, module=child, package=packageName)
        self._nodes[path] = node
        logger.debug("Loaded module '%s' from %s (%d new children)", moduleName, path, len(node.children))
        return module

    def get(self, path: Path) -> types.ModuleType | None:
        node = self._nodes.get(Path(path).absolute())
        return node.module if node is not None else None

    def children(self, path: Path) -> list[Path]:
        node = self._nodes.get(Path(path).absolute())
        return list(node.children) if node is not None else []

    def evict(self, path: Path, prefix: Path) -> bool:
        """
        Removes `path` and every child under `prefix` from the cache.
        Returns False when `path` was not cached.
        """
        path = Path(path).absolute()
        prefix = Path(prefix).absolute()
        node = self._nodes.pop(path, None)
        if node is None:
            return False

        for childPath in node.children:
            if childPath.is_relative_to(prefix):
                self.evict(childPath, prefix)

        if sys.modules.get(node.name) is node.module:
            del sys.modules[node.name]
        self._dropPackageIfUnused(node.package)
        return True

    def paths(self) -> list[Path]:
        return list(self._nodes)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, (str, Path)) and Path(path).absolute() in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    # ----- internals -----

    def _ensurePackage(self, packageRoot: Path) -> str:
        if PACKAGES_NAMESPACE not in sys.modules:
            namespace = types.ModuleType(PACKAGES_NAMESPACE)
            namespace.__path__ = []
            sys.modules[PACKAGES_NAMESPACE] = namespace

        packageName = _packageModuleName(packageRoot)
        if packageName not in sys.modules:
            package = types.ModuleType(packageName)
            package.__path__ = [str(packageRoot)]
            package.__package__ = packageName
            sys.modules[packageName] = package
        return packageName

    def _moduleName(self, path: Path, packageRoot: Path, packageName: str) -> str:
        try:
            relative = path.relative_to(packageRoot)
        except ValueError:
            return packageName + "." + re.sub(r"\W", "_", path.stem)
        parts = [re.sub(r"\W", "_", part) for part in relative.with_suffix("").parts]
        return ".".join([packageName, *parts])

    def _dropPackageIfUnused(self, packageName: str) -> None:
        prefix = packageName + "."
        if any(node.package == packageName for node in self._nodes.values()):
            return
        for name in [n for n in sys.modules if n == packageName or n.startswith(prefix)]:
            del sys.modules[name]
