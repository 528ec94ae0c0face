# pkghost/packages/types.py
from __future__ import annotations
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, Protocol

from pkghost.host.ipc import MessageDispatcher
from pkghost.packages.manifest import PackageManifest

__all__ = ["PackageModule", "LoadedPackage", "getHook", "getMessages"]



class PackageModule(Protocol):
    """
    What an entry module may export. Every member is optional and detected
    structurally; hooks may be plain functions or coroutine functions.
    """
    messages: Mapping[str, Callable[..., Any]]

    def load(self) -> Any: ...
    def unload(self) -> Any: ...



def getHook(module: Any, name: str) -> Callable[[], Any] | None:
    hook = getattr(module, name, None)
    return hook if callable(hook) else None



def getMessages(module: Any) -> Mapping[str, Any]:
    messages = getattr(module, "messages", None)
    return messages if isinstance(messages, Mapping) else {}



class LoadedPackage:
    """
    Runtime record of one loaded manifest. Owned by the PackageTable between
    the end of a successful load and the table-removal step of unload.
    """
    def __init__(
        self,
        manifest: PackageManifest,
        sourcePath: Path,
        resolvedOutputPath: Path,
        messageDispatcher: MessageDispatcher,
    ) -> None:
        self._manifest = manifest
        self._sourcePath = Path(sourcePath)
        self.resolvedOutputPath = Path(resolvedOutputPath)
        self.messageDispatcher = messageDispatcher
        self.module: Any | None = None
        self.mainPath: Path | None = None
        self.registeredPanels: list[str] = []
        self.registeredMenus: list[str] = []
        self.i18nRegistered = False

    @property
    def manifest(self) -> PackageManifest:
        return self._manifest

    @property
    def sourcePath(self) -> Path:
        return self._sourcePath

    @property
    def name(self) -> str:
        return self._manifest.name

    @property
    def version(self) -> str | None:
        return self._manifest.version

    def __repr__(self) -> str:
        return f"LoadedPackage(name={self.name!r}, sourcePath={str(self._sourcePath)!r})"
