import sys
import textwrap
from pathlib import Path
from typing import Any

import json5
import pytest

from pkghost.host import HostServices, WindowBroadcaster
from pkghost.packages import PackageManager, PackageRegistry



def pytest_configure(config: pytest.Config) -> None:
    if sys.flags.optimize:
        raise RuntimeError("Assertions are disabled (optimize > 0)")



def write_package(
    root: Path,
    dir_name: str,
    manifest: dict[str, Any],
    files: dict[str, str] | None = None,
) -> Path:
    """Writes <root>/<dir_name>/package.json5 plus any extra files (dedented)."""
    pkg_dir = root / dir_name
    pkg_dir.mkdir(parents=True, exist_ok=True)
    (pkg_dir / "package.json5").write_text(json5.dumps(manifest, indent=2), encoding="utf-8")
    for rel_path, content in (files or {}).items():
        target = pkg_dir / rel_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(textwrap.dedent(content), encoding="utf-8")
    return pkg_dir



class RecordingBuilder:
    """Builder double: copies nothing, just creates bin/dev with the current manifest."""
    def __init__(self, fail: bool = False) -> None:
        self.calls: list[Path] = []
        self.fail = fail

    async def build(self, path: Path, *, minify: bool, transpile: bool) -> Path:
        self.calls.append(Path(path))
        if self.fail:
            raise RuntimeError("compiler exploded")
        out = Path(path) / "bin" / "dev"
        out.mkdir(parents=True, exist_ok=True)
        (out / "package.json5").write_text((Path(path) / "package.json5").read_text(encoding="utf-8"), encoding="utf-8")
        return out



@pytest.fixture()
def packages_root(tmp_path: Path) -> Path:
    root = tmp_path / "pkgs"
    root.mkdir()
    return root



@pytest.fixture()
def events() -> list[dict[str, Any]]:
    return []



@pytest.fixture()
def services(events) -> HostServices:
    broadcaster = WindowBroadcaster()
    broadcaster.addWindow("main", events.append)
    return HostServices(broadcaster=broadcaster)



@pytest.fixture()
def builder() -> RecordingBuilder:
    return RecordingBuilder()



@pytest.fixture()
def manager(services, builder, packages_root) -> PackageManager:
    registry = PackageRegistry()
    registry.versions.set("editor", "1.2.0")
    registry.searchPaths.add(packages_root)
    return PackageManager(registry, services, builder=builder)
