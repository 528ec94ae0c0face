# pkghost/app/bootstrap.py
from __future__ import annotations
import logging

from pkghost.app.context import PROCESS_REGISTRY
from pkghost.app.globals import MESSAGE_BUS_KEY, PACKAGE_MANAGER_KEY
from pkghost.app.settings import settings, settingsBool
from pkghost.host import HostServices, MessageBus
from pkghost.packages import PackageManager, PackageRegistry

logger = logging.getLogger(__name__)

__all__ = ["initPackageManager", "shutdownPackageManager"]



def initPackageManager(services: HostServices | None = None, *, overwrite: bool = False) -> PackageManager:
    """
    Builds the process-wide PackageManager from settings and registers it
    (and its message bus) in PROCESS_REGISTRY.
    """
    existing = PROCESS_REGISTRY.get(PACKAGE_MANAGER_KEY)
    if existing is not None and not overwrite:
        return existing

    services = services or HostServices()
    registry = PackageRegistry()

    hostVersions = settings("packages.hostVersions", {})
    if isinstance(hostVersions, dict):
        registry.versions.update({str(key): str(value) for key, value in hostVersions.items()})

    searchPaths = settings("packages.searchPaths", [])
    if isinstance(searchPaths, list):
        registry.searchPaths.add(str(path) for path in searchPaths)

    manager = PackageManager(
        registry,
        services,
        lang=str(settings("packages.lang", "en")),
        builtinRoot=settings("packages.builtinRoot"),
        minify=settingsBool("packages.build.minify"),
        transpile=settingsBool("packages.build.transpile"),
    )

    PROCESS_REGISTRY.register(PACKAGE_MANAGER_KEY, manager, overwrite=True)
    if isinstance(services.messages, MessageBus):
        PROCESS_REGISTRY.register(MESSAGE_BUS_KEY, services.messages, overwrite=True)

    logger.debug(
        "PackageManager ready: lang=%s, %d search path(s), %d host version(s)",
        manager.lang, len(registry.searchPaths), len(registry.versions.snapshot()),
    )
    return manager



def shutdownPackageManager() -> None:
    PROCESS_REGISTRY.unregister(PACKAGE_MANAGER_KEY)
    PROCESS_REGISTRY.unregister(MESSAGE_BUS_KEY)
