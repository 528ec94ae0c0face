# pkghost/app/factory.py
from __future__ import annotations
import logging
from collections.abc import Sequence

from fastapi import APIRouter, FastAPI

from pkghost.app.bootstrap import initPackageManager
from pkghost.app.lifecycle import life
from pkghost.host import HostServices



def createApp(*, extraRouters: Sequence[APIRouter] = (), services: HostServices | None = None) -> FastAPI:
    # Process-wide bootstrap (idempotent)
    from pkghost.core.logging import configureLogging
    configureLogging()

    logger = logging.getLogger(__name__)

    manager = initPackageManager(services)

    from pkghost.api.messages import registerPackageMessages
    registerPackageMessages(manager, manager.services.messages)

    app = FastAPI(lifespan=life)

    from pkghost.api.routes import router as packagesRouter
    app.include_router(packagesRouter)

    for router in extraRouters:
        app.include_router(router)

    logger.info("Host initialized with %d extra routers(s)", len(extraRouters))
    return app
