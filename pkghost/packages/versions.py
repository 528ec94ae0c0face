# pkghost/packages/versions.py
from __future__ import annotations
from collections.abc import Mapping

from pkghost.semver import satisfies

__all__ = ["VersionRegistry"]



class VersionRegistry:
    """Host component name -> semantic version of that component."""
    def __init__(self, versions: Mapping[str, str] | None = None) -> None:
        self._versions: dict[str, str] = dict(versions or {})

    def set(self, host: str, version: str) -> None:
        self._versions[host] = version

    def update(self, versions: Mapping[str, str]) -> None:
        self._versions.update(versions)

    def replace(self, versions: Mapping[str, str]) -> None:
        self._versions = dict(versions)

    def remove(self, host: str) -> None:
        self._versions.pop(host, None)

    def get(self, host: str) -> str | None:
        return self._versions.get(host)

    def incompatibility(self, host: str, requiredRange: str) -> str | None:
        """None when `host` exists and satisfies `requiredRange`, else the reason."""
        currentVersion = self._versions.get(host)
        if not currentVersion:
            return f"Host '{host}' not exists."
        if not satisfies(currentVersion, requiredRange):
            return f"Host '{host}' require ver {requiredRange} (current {currentVersion})"
        return None

    def snapshot(self) -> dict[str, str]:
        return dict(self._versions)

    def __contains__(self, host: object) -> bool:
        return host in self._versions
