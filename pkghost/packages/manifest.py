# pkghost/packages/manifest.py
from __future__ import annotations
from pathlib import Path
from typing import Any

import json5
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from pkghost.packages.errors import ManifestError

__all__ = ["MANIFEST_FILENAMES", "PackageManifest", "findManifestPath", "readManifest"]



# Checked in order; the first one present wins.
MANIFEST_FILENAMES = ("package.json5", "package.json")



class PackageManifest(BaseModel):
    """
    A package's declaration document.

    Unknown keys (description, author, ...) are kept and show up in info dumps.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str = Field(min_length=1)
    version: str | None = None
    hosts: dict[str, str] = Field(default_factory=dict)
    # Constraint values are not evaluated. Only the keys matter.
    pkgDependencies: dict[str, Any] = Field(default_factory=dict)
    build: bool = False
    main: str | None = None
    mainMenu: dict[str, dict[str, Any]] = Field(default_factory=dict, alias="main-menu")
    panels: dict[str, dict[str, Any]] = Field(default_factory=dict)

    @field_validator("hosts", "pkgDependencies", "mainMenu", "panels", mode="before")
    @classmethod
    def _nullAsEmpty(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("name")
    @classmethod
    def _strippedName(cls, value: str) -> str:
        if value != value.strip():
            raise ValueError("name must not have leading or trailing whitespace")
        return value

    def info(self) -> dict[str, Any]:
        """JSON-ready dump using the on-disk key names ("main-menu")."""
        return self.model_dump(by_alias=True, mode="json")



def findManifestPath(packageDir: Path) -> Path | None:
    for fileName in MANIFEST_FILENAMES:
        candidate = Path(packageDir) / fileName
        if candidate.is_file():
            return candidate
    return None



def readManifest(packageDir: Path) -> PackageManifest:
    """
    Reads and validates the manifest inside `packageDir`.

    Raises ManifestError when the file is missing, is not valid json5, or
    does not describe a package.
    """
    packageDir = Path(packageDir)
    manifestPath = findManifestPath(packageDir)
    if manifestPath is None:
        raise ManifestError(
            f"Failed to load manifest: none of {', '.join(MANIFEST_FILENAMES)} found in '{packageDir}'",
            path=packageDir,
        )

    try:
        raw = json5.loads(manifestPath.read_text(encoding="utf-8"))
    except Exception as err:
        raise ManifestError(f"Failed to load '{manifestPath.name}': {err}", path=packageDir) from err

    if not isinstance(raw, dict):
        raise ManifestError(f"Failed to load '{manifestPath.name}': top level must be an object", path=packageDir)

    try:
        return PackageManifest.model_validate(raw)
    except ValidationError as err:
        raise ManifestError(f"Invalid '{manifestPath.name}': {err}", path=packageDir) from err
