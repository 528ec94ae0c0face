# pkghost/semver/__init__.py
from .semver import (
    SemVer,
    SemVerRange,
    parseSemVer,
    parseSemVerRange,
    satisfies,
    versionSatisfiesRange,
)

__all__ = [
    "SemVer",
    "SemVerRange",
    "parseSemVer",
    "parseSemVerRange",
    "satisfies",
    "versionSatisfiesRange",
]
