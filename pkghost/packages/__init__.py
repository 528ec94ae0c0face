# pkghost/packages/__init__.py
from .builder import BUILD_OUTPUT_DIR, Builder, BuildError, CopyTreeBuilder, resolveOutputPath
from .errors import (
    BuildFailed,
    DependencyCycle,
    DependencyNotFound,
    HostIncompatible,
    I18nLoadError,
    LoadHookFailed,
    MainLoadError,
    ManifestError,
    PackageError,
    PackageWarning,
)
from .manager import PACKAGE_LOADED, PACKAGE_UNLOADED, PackageManager, messageName
from .manifest import PackageManifest, readManifest
from .modules import ModuleGraph, ModuleLoader
from .registry import PackageRegistry
from .search_paths import SearchPathSet
from .tables import PackageTable, PanelRegistry
from .types import LoadedPackage, PackageModule
from .versions import VersionRegistry

__all__ = [
    "BUILD_OUTPUT_DIR", "Builder", "BuildError", "CopyTreeBuilder", "resolveOutputPath",
    "BuildFailed", "DependencyCycle", "DependencyNotFound", "HostIncompatible",
    "I18nLoadError", "LoadHookFailed", "MainLoadError", "ManifestError",
    "PackageError", "PackageWarning",
    "PACKAGE_LOADED", "PACKAGE_UNLOADED", "PackageManager", "messageName",
    "PackageManifest", "readManifest",
    "ModuleGraph", "ModuleLoader",
    "PackageRegistry", "SearchPathSet", "PackageTable", "PanelRegistry",
    "LoadedPackage", "PackageModule", "VersionRegistry",
]
