# pkghost/app/lifecycle.py
from __future__ import annotations
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from pkghost.app.globals import getPackageManager
from pkghost.app.settings import settings
from pkghost.packages import PackageError

logger = logging.getLogger(__name__)



async def autoloadPackages() -> tuple[list[str], list[str]]:
    """Loads every package named in `packages.autoload`. Returns (loaded, failed)."""
    manager = getPackageManager()
    names = settings("packages.autoload", [])
    if not isinstance(names, list):
        logger.warning("Setting 'packages.autoload' must be a list, got %s", type(names).__name__)
        return [], []

    loaded: list[str] = []
    failed: list[str] = []
    for name in names:
        path = manager.find(str(name))
        if path is None:
            logger.error("Autoload: package '%s' not found in search paths", name)
            failed.append(str(name))
            continue
        try:
            await manager.load(path)
        except PackageError:
            # Already logged by the manager.
            failed.append(str(name))
            continue
        loaded.append(str(name))
    return loaded, failed



@asynccontextmanager
async def life(app: FastAPI) -> AsyncIterator[None]:
    # --------------- Startup ---------------
    loaded, failed = await autoloadPackages()
    logger.info("Startup: %d package(s) loaded, %d failed", len(loaded), len(failed))

    yield

    # --------------- Shutdown ---------------
    manager = getPackageManager()
    for pkg in reversed(manager.loadedPackages()):
        await manager.unload(pkg.sourcePath)
