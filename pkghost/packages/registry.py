# pkghost/packages/registry.py
from __future__ import annotations
from dataclasses import dataclass, field

from pkghost.packages.search_paths import SearchPathSet
from pkghost.packages.tables import PackageTable, PanelRegistry
from pkghost.packages.versions import VersionRegistry

__all__ = ["PackageRegistry"]



@dataclass
class PackageRegistry:
    """
    The four bookkeeping tables of the package system. One instance per
    process (see pkghost.app.bootstrap); tests build fresh ones.
    """
    versions: VersionRegistry = field(default_factory=VersionRegistry)
    searchPaths: SearchPathSet = field(default_factory=SearchPathSet)
    packages: PackageTable = field(default_factory=PackageTable)
    panels: PanelRegistry = field(default_factory=PanelRegistry)
