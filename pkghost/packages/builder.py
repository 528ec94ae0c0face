# pkghost/packages/builder.py
from __future__ import annotations
import asyncio
import compileall
import logging
import shutil
from pathlib import Path
from typing import Protocol

from pkghost.packages.errors import PackageError
from pkghost.packages.manifest import PackageManifest, readManifest

logger = logging.getLogger(__name__)

__all__ = ["BUILD_OUTPUT_DIR", "Builder", "BuildError", "CopyTreeBuilder", "buildOutputPath", "resolveOutputPath"]



# Relative to the package source directory.
BUILD_OUTPUT_DIR = Path("bin") / "dev"

_IGNORED_NAMES = ("__pycache__", ".git", ".pytest_cache", ".mypy_cache", "node_modules")



class Builder(Protocol):
    async def build(self, path: Path, *, minify: bool, transpile: bool) -> Path: ...



class BuildError(RuntimeError):
    """Raised by the reference builder; load wraps it into BuildFailed."""



def buildOutputPath(sourcePath: Path) -> Path:
    return Path(sourcePath) / BUILD_OUTPUT_DIR



class CopyTreeBuilder:
    """
    Copies a package into <source>/bin/dev and optionally byte-compiles it.

    The source's own bin/ directory is never copied into the output.
    """
    def __init__(self, *, outputDir: Path = BUILD_OUTPUT_DIR) -> None:
        self.outputDir = Path(outputDir)

    async def build(self, path: Path, *, minify: bool = False, transpile: bool = False) -> Path:
        return await asyncio.to_thread(self._buildSync, Path(path), minify, transpile)

    def _buildSync(self, sourcePath: Path, minify: bool, transpile: bool) -> Path:
        if not sourcePath.is_dir():
            raise BuildError(f"Package source '{sourcePath}' is not a directory")

        outputPath = sourcePath / self.outputDir
        topLevelSkip = self.outputDir.parts[0]

        def ignore(directory: str, names: list[str]) -> set[str]:
            skipped = {name for name in names if name in _IGNORED_NAMES}
            if Path(directory) == sourcePath and topLevelSkip in names:
                skipped.add(topLevelSkip)
            return skipped

        try:
            if outputPath.exists():
                shutil.rmtree(outputPath)
            shutil.copytree(sourcePath, outputPath, ignore=ignore)
        except OSError as err:
            raise BuildError(f"Copying '{sourcePath}' to '{outputPath}' failed: {err}") from err

        if transpile:
            ok = compileall.compile_dir(str(outputPath), quiet=1, optimize=2 if minify else -1)
            if not ok:
                raise BuildError(f"Byte-compiling '{outputPath}' failed")

        logger.debug("Built %s into %s (minify=%s, transpile=%s)", sourcePath, outputPath, minify, transpile)
        return outputPath



def _cachedVersionMatches(outputPath: Path, manifest: PackageManifest) -> bool:
    try:
        cached = readManifest(outputPath)
    except PackageError:
        return False
    return cached.version == manifest.version



async def resolveOutputPath(
    manifest: PackageManifest,
    sourcePath: Path,
    forceRebuild: bool,
    builder: Builder,
    *,
    minify: bool = False,
    transpile: bool = False,
) -> Path:
    """
    Where the runnable form of a package lives.

    - no `build` flag: the source directory itself
    - a bin/dev holding the same manifest version: reused unless forced
    - otherwise: whatever the builder produces, then bin/dev
    Builder errors propagate unchanged.
    """
    sourcePath = Path(sourcePath)
    if not manifest.build:
        return sourcePath

    outputPath = buildOutputPath(sourcePath)
    if not forceRebuild and _cachedVersionMatches(outputPath, manifest):
        logger.debug("Reusing build output of %s at %s", manifest.name, outputPath)
        return outputPath

    logger.info("Building %s", manifest.name)
    await builder.build(sourcePath, minify=minify, transpile=transpile)
    return outputPath
