# pkghost/host/__init__.py
from __future__ import annotations
from dataclasses import dataclass, field

from .broadcast import Broadcaster, WindowBroadcaster
from .i18n import I18nTable, LocalizationService
from .images import ImageDecoder, ImageHandle, PillowImageDecoder
from .ipc import MessageBus, MessageDispatcher, MessageTransport
from .menu import MainMenu, MenuService

__all__ = [
    "HostServices",
    "Broadcaster", "WindowBroadcaster",
    "I18nTable", "LocalizationService",
    "ImageDecoder", "ImageHandle", "PillowImageDecoder",
    "MessageBus", "MessageDispatcher", "MessageTransport",
    "MainMenu", "MenuService",
]



@dataclass
class HostServices:
    """The host-side collaborators a PackageManager wires packages into."""
    menu: MenuService = field(default_factory=MainMenu)
    i18n: LocalizationService = field(default_factory=I18nTable)
    messages: MessageTransport = field(default_factory=MessageBus)
    broadcaster: Broadcaster = field(default_factory=WindowBroadcaster)
    images: ImageDecoder = field(default_factory=PillowImageDecoder)
