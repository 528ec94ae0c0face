# pkghost/app/context.py
from __future__ import annotations

from typing import Any

__all__ = ["PROCESS_REGISTRY"]



class _ProcessRegistry:
    """Process-wide service slots ("packages.manager", "host.messages", ...)."""
    def __init__(self) -> None:
        self._slots: dict[str, Any] = {}

    def register(self, key: str, service: Any, *, overwrite: bool = False) -> None:
        if key in self._slots and not overwrite:
            raise ValueError(f"Slot '{key}' is already taken")
        self._slots[key] = service

    def unregister(self, key: str) -> None:
        self._slots.pop(key, None)

    def get(self, key: str) -> Any | None:
        return self._slots.get(key)

    def keys(self) -> list[str]:
        return sorted(self._slots)

    def __contains__(self, key: object) -> bool:
        return key in self._slots

# One per process
PROCESS_REGISTRY = _ProcessRegistry()
