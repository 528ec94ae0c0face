# pkghost/packages/errors.py
from __future__ import annotations
from enum import Enum
from pathlib import Path

__all__ = [
    "PackageError", "ManifestError", "HostIncompatible", "DependencyNotFound",
    "DependencyCycle", "BuildFailed", "I18nLoadError", "MainLoadError",
    "LoadHookFailed", "PackageWarning",
]



class PackageError(Exception):
    """Base class for fatal lifecycle errors. Carries the package directory it concerns."""
    def __init__(self, message: str, *, path: Path | None = None, packageName: str | None = None):
        super().__init__(message)
        self.path = path
        self.packageName = packageName



class ManifestError(PackageError):
    """Manifest missing, unreadable or invalid."""



class HostIncompatible(PackageError):
    """A host listed in `hosts` is unknown or its version does not satisfy the range."""



class DependencyNotFound(PackageError):
    """A `pkgDependencies` entry could not be resolved through the search paths."""



class DependencyCycle(DependencyNotFound):
    """A package (transitively) depends on itself."""



class BuildFailed(PackageError):
    """The builder could not produce a runnable output directory."""



class I18nLoadError(PackageError):
    """The localization file for the active language could not be loaded."""



class MainLoadError(PackageError):
    """The entry module declared in `main` could not be resolved or executed."""



class LoadHookFailed(PackageError):
    """The entry module's load() hook raised; everything registered was rolled back."""



class PackageWarning(str, Enum):
    """Non-fatal conditions. Logged with extra={"warningCode": ...}."""
    PANEL_COLLISION = "PanelCollision"
    INVALID_MENU_PATH = "InvalidMenuPath"
    UNLOAD_HOOK_FAILED = "UnloadHookFailed"
    UNCACHE_FAILED = "UncacheFailed"
