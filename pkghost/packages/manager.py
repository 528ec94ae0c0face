# pkghost/packages/manager.py
from __future__ import annotations
import functools
import inspect
import logging
import os
from collections.abc import Callable, Iterable
from pathlib import Path, PurePosixPath
from typing import Any

import json5

from pkghost.core.logging import resetLogContext, setLogContext
from pkghost.host import HostServices, MessageDispatcher
from pkghost.packages.builder import Builder, CopyTreeBuilder, resolveOutputPath
from pkghost.packages.errors import (
    BuildFailed,
    DependencyCycle,
    DependencyNotFound,
    HostIncompatible,
    I18nLoadError,
    LoadHookFailed,
    MainLoadError,
    PackageError,
    PackageWarning,
)
from pkghost.packages.manifest import readManifest
from pkghost.packages.modules import ModuleGraph, ModuleLoader
from pkghost.packages.registry import PackageRegistry
from pkghost.packages.search_paths import normalizePath
from pkghost.packages.types import LoadedPackage, getHook, getMessages
from pkghost.packages.versions import VersionRegistry

logger = logging.getLogger("pkghost.packages")

__all__ = ["PackageManager", "PACKAGE_LOADED", "PACKAGE_UNLOADED"]



PACKAGE_LOADED = "package:loaded"
PACKAGE_UNLOADED = "package:unloaded"

_I18N_EXTENSIONS = (".json5", ".json")



async def _maybeAwait(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value



def messageName(packageName: str, name: str) -> str:
    """Handlers are namespaced with the package name unless they already carry an owner."""
    if ":" in name:
        return name
    return f"{packageName}:{name}"



class PackageManager:
    """
    Load/unload/reload lifecycle of packages.

    All operations run on one event loop and await their steps one after the
    other; callers are expected to issue one lifecycle operation at a time.
    """
    def __init__(
        self,
        registry: PackageRegistry | None = None,
        services: HostServices | None = None,
        *,
        modules: ModuleLoader | None = None,
        builder: Builder | None = None,
        lang: str = "en",
        builtinRoot: str | os.PathLike[str] | None = None,
        minify: bool = False,
        transpile: bool = False,
    ) -> None:
        self.registry = registry or PackageRegistry()
        self.services = services or HostServices()
        self.modules: ModuleLoader = modules or ModuleGraph()
        self.builder: Builder = builder or CopyTreeBuilder()
        self.lang = lang
        self.builtinRoot = normalizePath(builtinRoot) if builtinRoot is not None else None
        self.minify = minify
        self.transpile = transpile

    # ----- lifecycle -----

    async def load(self, path: str | os.PathLike[str], build: bool = False) -> LoadedPackage:
        """
        Loads the package at `path` (and its dependencies first).

        Returns the existing record when the path is already loaded. Raises a
        PackageError subclass on the first failing step.
        """
        return await self._load(normalizePath(path), build, ())

    async def unload(self, path: str | os.PathLike[str]) -> None:
        """Tears a package out of the host. Never raises; unknown paths are a no-op."""
        sourcePath = normalizePath(path)
        pkg = self.registry.packages.get(sourcePath)
        if pkg is None:
            return

        token = setLogContext(operation="unload", packageName=pkg.name, packagePath=str(sourcePath))
        try:
            self._teardown(pkg)
            if pkg.module is not None:
                await self._unloadModule(pkg)

            try:
                self.registry.packages.remove(sourcePath)
            except Exception:
                logger.exception("Failed to drop %s from the package table", pkg.name)
            logger.info("%s unloaded", pkg.name)
            await self._broadcast(PACKAGE_UNLOADED, pkg.name)
        finally:
            resetLogContext(token)

    async def reload(self, path: str | os.PathLike[str], rebuild: bool = True) -> LoadedPackage | None:
        """
        Optional rebuild, then unload, then load. Returns None when the path
        is not loaded. A failure leaves the package unloaded.
        """
        sourcePath = normalizePath(path)
        pkg = self.registry.packages.get(sourcePath)
        if pkg is None:
            return None

        if rebuild and pkg.manifest.build:
            logger.info("Rebuilding %s", pkg.name)
            await self.build(sourcePath)

        await self.unload(sourcePath)
        return await self.load(sourcePath)

    async def build(self, path: str | os.PathLike[str]) -> Path:
        """Runs the builder on a package source directory and returns its output."""
        sourcePath = normalizePath(path)
        try:
            return await self.builder.build(sourcePath, minify=self.minify, transpile=self.transpile)
        except Exception as err:
            logger.error("Failed to build package at %s, %s", sourcePath, err)
            raise BuildFailed(f"Failed to build package at {sourcePath}: {err}", path=sourcePath) from err

    # ----- queries -----

    def findPackagePathByName(self, name: str) -> Path | None:
        """Source path of the loaded package called `name`. Use find() to look on disk."""
        return self.registry.packages.pathForName(name)

    def findPackageInfoContainingPath(self, path: str | os.PathLike[str]) -> LoadedPackage | None:
        return self.registry.packages.containing(normalizePath(path))

    def panelInfo(self, panelId: str) -> dict[str, Any] | None:
        return self.registry.panels.get(panelId)

    def packagePath(self, name: str) -> Path | None:
        return self.registry.packages.pathForName(name)

    def packageInfo(self, path: str | os.PathLike[str]) -> LoadedPackage | None:
        return self.registry.packages.get(normalizePath(path))

    def loadedPackages(self) -> list[LoadedPackage]:
        return self.registry.packages.values()

    def isBuiltin(self, path: str | os.PathLike[str]) -> bool:
        if self.builtinRoot is None:
            return False
        return normalizePath(path).is_relative_to(self.builtinRoot)

    def packageDescriptor(self, pkg: LoadedPackage) -> dict[str, Any]:
        return {
            "path": str(pkg.sourcePath),
            "builtin": self.isBuiltin(pkg.sourcePath),
            "enabled": True,
            "info": pkg.manifest.info(),
        }

    def packageInfos(self) -> list[dict[str, Any]]:
        return [self.packageDescriptor(pkg) for pkg in self.registry.packages.values()]

    # ----- search paths & host versions -----

    def addSearchPaths(self, paths: str | os.PathLike[str] | Iterable[str | os.PathLike[str]]) -> None:
        self.registry.searchPaths.add(paths)

    def removeSearchPath(self, path: str | os.PathLike[str]) -> bool:
        return self.registry.searchPaths.remove(path)

    def resetSearchPaths(self) -> None:
        self.registry.searchPaths.reset()

    def find(self, name: str) -> Path | None:
        return self.registry.searchPaths.find(name)

    @property
    def searchPaths(self) -> list[Path]:
        return self.registry.searchPaths.paths

    @property
    def versions(self) -> VersionRegistry:
        return self.registry.versions

    # ----- load pipeline -----

    async def _load(self, sourcePath: Path, forceBuild: bool, chain: tuple[Path, ...]) -> LoadedPackage:
        existing = self.registry.packages.get(sourcePath)
        if existing is not None:
            return existing

        token = setLogContext(operation="load", packagePath=str(sourcePath))
        try:
            return await self._loadSteps(sourcePath, forceBuild, chain)
        except PackageError as err:
            logger.error("Failed to load package at %s: %s", sourcePath, err)
            raise
        finally:
            resetLogContext(token)

    async def _loadSteps(self, sourcePath: Path, forceBuild: bool, chain: tuple[Path, ...]) -> LoadedPackage:
        manifest = readManifest(sourcePath)
        name = manifest.name
        setLogContext(packageName=name)

        for host, requiredRange in manifest.hosts.items():
            reason = self.registry.versions.incompatibility(host, requiredRange)
            if reason is not None:
                raise HostIncompatible(reason, path=sourcePath, packageName=name)

        chain = (*chain, sourcePath)
        for depName in manifest.pkgDependencies:
            depPath = self.registry.searchPaths.find(depName)
            if depPath is None:
                raise DependencyNotFound(f"Cannot find dependent package {depName}", path=sourcePath, packageName=name)
            depPath = normalizePath(depPath)
            if depPath in chain:
                cycle = " -> ".join(p.name for p in (*chain, depPath))
                raise DependencyCycle(f"Dependency cycle detected: {cycle}", path=sourcePath, packageName=name)
            await self._load(depPath, False, chain)

        try:
            outputPath = await resolveOutputPath(
                manifest, sourcePath, forceBuild, self.builder,
                minify=self.minify, transpile=self.transpile,
            )
        except Exception as err:
            raise BuildFailed(f"Building failed: {err}", path=sourcePath, packageName=name) from err

        pkg = LoadedPackage(
            manifest=manifest,
            sourcePath=sourcePath,
            resolvedOutputPath=outputPath,
            messageDispatcher=MessageDispatcher(self.services.messages),
        )

        undo: list[Callable[[], None]] = []
        try:
            self._registerI18n(pkg, undo)
            self._loadMain(pkg, undo)
            self._registerMessages(pkg, undo)
            self._registerMenus(pkg, undo)
            self._registerPanels(pkg, undo)

            self.registry.packages.insert(pkg)
            undo.append(lambda: self.registry.packages.remove(sourcePath))

            hook = getHook(pkg.module, "load")
            if hook is not None:
                try:
                    await _maybeAwait(hook())
                except Exception as err:
                    raise LoadHookFailed(
                        f"Failed to execute load function: {err}", path=sourcePath, packageName=name,
                    ) from err
        except Exception:
            self._rollback(undo)
            raise

        logger.info("%s loaded", name)
        await self._broadcast(PACKAGE_LOADED, name)
        return pkg

    def _registerI18n(self, pkg: LoadedPackage, undo: list[Callable[[], None]]) -> None:
        i18nFile = self._i18nFile(pkg.resolvedOutputPath)
        if i18nFile is None:
            return
        try:
            phrases = json5.loads(i18nFile.read_text(encoding="utf-8"))
        except Exception as err:
            raise I18nLoadError(
                f"Failed to load i18n file '{i18nFile}': {err}", path=pkg.sourcePath, packageName=pkg.name,
            ) from err
        if not isinstance(phrases, dict):
            raise I18nLoadError(
                f"Failed to load i18n file '{i18nFile}': top level must be an object",
                path=pkg.sourcePath, packageName=pkg.name,
            )

        self.services.i18n.extend({pkg.name: phrases})
        pkg.i18nRegistered = True
        undo.append(lambda: self.services.i18n.unset([pkg.name]))

    def _i18nFile(self, outputPath: Path) -> Path | None:
        for ext in _I18N_EXTENSIONS:
            candidate = outputPath / "i18n" / f"{self.lang}{ext}"
            if candidate.is_file():
                return candidate
        return None

    def _loadMain(self, pkg: LoadedPackage, undo: list[Callable[[], None]]) -> None:
        if not pkg.manifest.main:
            return

        mainPath = self._resolveMain(pkg.resolvedOutputPath, pkg.manifest.main)
        if mainPath is None:
            raise MainLoadError(
                f"Failed to load main file: '{pkg.manifest.main}' not found in {pkg.resolvedOutputPath}",
                path=pkg.sourcePath, packageName=pkg.name,
            )
        try:
            module = self.modules.load(mainPath, packageRoot=pkg.resolvedOutputPath)
        except Exception as err:
            raise MainLoadError(
                f"Failed to load main file: {err}", path=pkg.sourcePath, packageName=pkg.name,
            ) from err

        pkg.module = module
        pkg.mainPath = mainPath
        undo.append(lambda: self.modules.evict(mainPath, pkg.resolvedOutputPath))

    @staticmethod
    def _resolveMain(outputPath: Path, main: str) -> Path | None:
        base = outputPath / main
        for candidate in (base, base.with_name(base.name + ".py"), base / "__init__.py"):
            if candidate.is_file():
                return candidate
        return None

    def _registerMessages(self, pkg: LoadedPackage, undo: list[Callable[[], None]]) -> None:
        messages = getMessages(pkg.module)
        if not messages:
            return
        undo.append(pkg.messageDispatcher.clear)
        for name, handler in messages.items():
            if not callable(handler):
                logger.debug("Skipping non-callable message '%s' of %s", name, pkg.name)
                continue
            pkg.messageDispatcher.on(messageName(pkg.name, name), self._wrapHandler(pkg, handler))

    @staticmethod
    def _wrapHandler(pkg: LoadedPackage, handler: Callable[..., Any]) -> Callable[..., Any]:
        packageName = pkg.name
        if inspect.iscoroutinefunction(handler):
            @functools.wraps(handler)
            async def asyncHandler(*args: Any, **kwargs: Any) -> Any:
                token = setLogContext(packageName=packageName)
                try:
                    return await handler(*args, **kwargs)
                finally:
                    resetLogContext(token)
            return asyncHandler

        @functools.wraps(handler)
        def syncHandler(*args: Any, **kwargs: Any) -> Any:
            token = setLogContext(packageName=packageName)
            try:
                return handler(*args, **kwargs)
            finally:
                resetLogContext(token)
        return syncHandler

    def _registerMenus(self, pkg: LoadedPackage, undo: list[Callable[[], None]]) -> None:
        for rawPath, options in pkg.manifest.mainMenu.items():
            menuPath = PurePosixPath(self.services.i18n.formatPath(rawPath))
            parent = str(menuPath.parent)
            if parent in (".", "/"):
                self._warn(PackageWarning.INVALID_MENU_PATH, "Can not add menu %s at root.", menuPath)
                continue

            template: dict[str, Any] = {"label": menuPath.name, **(options or {})}
            icon = template.get("icon")
            if isinstance(icon, str) and icon:
                template["icon"] = self.services.images.fromPath(pkg.resolvedOutputPath / icon)

            if not self.services.menu.add(parent, template):
                continue
            addedPath = str(PurePosixPath(parent) / str(template["label"]))
            pkg.registeredMenus.append(addedPath)
            undo.append(functools.partial(self.services.menu.remove, addedPath))

    def _registerPanels(self, pkg: LoadedPackage, undo: list[Callable[[], None]]) -> None:
        for panelName, options in pkg.manifest.panels.items():
            panelId = f"{pkg.name}.{panelName}"
            if panelId in self.registry.panels:
                self._warn(PackageWarning.PANEL_COLLISION, "Failed to add panel %s, already exists.", panelId)
                continue

            panel = {
                "type": "dockable",
                "title": panelId,
                "popable": True,
                "messages": [],
                "path": str(pkg.resolvedOutputPath),
                **(options or {}),
            }
            self.registry.panels.register(panelId, panel)
            pkg.registeredPanels.append(panelId)
            undo.append(functools.partial(self.registry.panels.unregister, panelId))

    def _rollback(self, undo: list[Callable[[], None]]) -> None:
        while undo:
            action = undo.pop()
            try:
                action()
            except Exception:
                logger.exception("Rollback step failed")

    # ----- unload pipeline -----

    def _teardown(self, pkg: LoadedPackage) -> None:
        if pkg.i18nRegistered:
            try:
                self.services.i18n.unset([pkg.name])
            except Exception:
                logger.exception("Failed to unset i18n of %s", pkg.name)

        for panelId in pkg.registeredPanels:
            try:
                self.registry.panels.unregister(panelId)
            except Exception:
                logger.exception("Failed to remove panel %s", panelId)

        for menuPath in pkg.registeredMenus:
            try:
                self.services.menu.remove(menuPath)
            except Exception:
                logger.exception("Failed to remove menu %s", menuPath)

        try:
            pkg.messageDispatcher.clear()
        except Exception:
            logger.exception("Failed to clear messages of %s", pkg.name)

    async def _unloadModule(self, pkg: LoadedPackage) -> None:
        hook = getHook(pkg.module, "unload")
        if hook is not None:
            try:
                await _maybeAwait(hook())
            except Exception as err:
                self._warn(
                    PackageWarning.UNLOAD_HOOK_FAILED,
                    "Failed to unload %s: %s", pkg.name, err, exc_info=True,
                )

        try:
            if pkg.mainPath is None or pkg.mainPath not in self.modules:
                self._warn(PackageWarning.UNCACHE_FAILED, "Failed to uncache module %s: not cached", pkg.mainPath)
                return
            self.modules.evict(pkg.mainPath, pkg.resolvedOutputPath)
        except Exception as err:
            self._warn(PackageWarning.UNCACHE_FAILED, "Failed to uncache module %s: %s", pkg.mainPath, err)

    # ----- helpers -----

    async def _broadcast(self, event: str, name: str) -> None:
        try:
            await self.services.broadcaster.notifyAllWindows(event, name)
        except Exception:
            logger.warning("Broadcast of %s for %s failed", event, name, exc_info=True)

    @staticmethod
    def _warn(code: PackageWarning, msg: str, *args: Any, exc_info: bool = False) -> None:
        logger.warning(msg, *args, extra={"warningCode": code.value}, exc_info=exc_info)
