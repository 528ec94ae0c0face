# pkghost/app/globals.py
from __future__ import annotations
from typing import TYPE_CHECKING, cast

from pkghost.app.context import PROCESS_REGISTRY

if TYPE_CHECKING:
    from pkghost.host import MessageBus
    from pkghost.packages import PackageManager

__all__ = ["PACKAGE_MANAGER_KEY", "MESSAGE_BUS_KEY", "getPackageManager", "getMessageBus"]



PACKAGE_MANAGER_KEY = "packages.manager"
MESSAGE_BUS_KEY = "host.messages"



def getPackageManager() -> PackageManager:
    manager = PROCESS_REGISTRY.get(PACKAGE_MANAGER_KEY)
    if manager is None:
        raise RuntimeError(
            "PackageManager is None.\n"
            "The host went looking for its packages and found an empty shelf.\n"
            "Call initPackageManager() before touching packages."
        )
    return cast("PackageManager", manager)



def getMessageBus() -> MessageBus:
    bus = PROCESS_REGISTRY.get(MESSAGE_BUS_KEY)
    if bus is None:
        raise RuntimeError("MessageBus is None. Call initPackageManager() first.")
    return cast("MessageBus", bus)
