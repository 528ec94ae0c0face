# pkghost/api/messages.py
from __future__ import annotations
import logging
from typing import Any

from pkghost.host import MessageDispatcher, MessageTransport
from pkghost.packages import PackageError, PackageManager

logger = logging.getLogger(__name__)

__all__ = ["registerPackageMessages"]



def registerPackageMessages(manager: PackageManager, transport: MessageTransport) -> MessageDispatcher:
    """
    Answers the package queries windows send over the message bus:

    - package:query-infos -> list of descriptors
    - package:query-info  -> one descriptor by name (empty path, null info when unknown)
    - package:reload      -> reload by name
    """
    dispatcher = MessageDispatcher(transport)

    def queryInfos() -> list[dict[str, Any]]:
        return manager.packageInfos()

    def queryInfo(name: str) -> dict[str, Any]:
        path = manager.packagePath(name)
        pkg = manager.packageInfo(path) if path is not None else None
        if pkg is None:
            return {"path": "", "builtin": False, "enabled": True, "info": None}
        return manager.packageDescriptor(pkg)

    async def reload(name: str) -> None:
        path = manager.packagePath(name)
        if path is None:
            logger.error("Failed to reload package %s: not found", name)
            return
        try:
            await manager.reload(path)
        except PackageError as err:
            logger.error("Failed to reload package %s: %s", name, err)

    dispatcher.on("package:query-infos", queryInfos)
    dispatcher.on("package:query-info", queryInfo)
    dispatcher.on("package:reload", reload)
    return dispatcher
