# tests/pkghost/packages/test_tables.py
from pathlib import Path

import pytest

from pkghost.host import MessageBus, MessageDispatcher
from pkghost.packages import LoadedPackage, PackageManifest, PackageTable, PanelRegistry


def _pkg(name: str, path: str) -> LoadedPackage:
    return LoadedPackage(
        manifest=PackageManifest(name=name),
        sourcePath=Path(path),
        resolvedOutputPath=Path(path),
        messageDispatcher=MessageDispatcher(MessageBus()),
    )


def test_insert_and_lookup_both_indices():
    table = PackageTable()
    pkg = _pkg("foo", "/pkgs/foo")
    table.insert(pkg)
    assert table.get(Path("/pkgs/foo")) is pkg
    assert table.pathForName("foo") == Path("/pkgs/foo")
    assert table.getByName("foo") is pkg
    assert Path("/pkgs/foo") in table
    assert len(table) == 1


def test_name_index_is_last_write_wins_and_remove_keeps_newer_owner():
    table = PackageTable()
    first = _pkg("foo", "/a/foo")
    second = _pkg("foo", "/b/foo")
    table.insert(first)
    table.insert(second)
    assert table.pathForName("foo") == Path("/b/foo")

    table.remove(Path("/a/foo"))
    assert table.pathForName("foo") == Path("/b/foo")
    table.remove(Path("/b/foo"))
    assert table.pathForName("foo") is None
    assert table.remove(Path("/b/foo")) is None


def test_containing_picks_longest_prefix():
    table = PackageTable()
    outer = _pkg("outer", "/pkgs/outer")
    inner = _pkg("inner", "/pkgs/outer/vendor/inner")
    table.insert(outer)
    table.insert(inner)
    assert table.containing(Path("/pkgs/outer/panel/index.html")) is outer
    assert table.containing(Path("/pkgs/outer/vendor/inner/main.py")) is inner
    assert table.containing(Path("/pkgs/outer")) is outer
    assert table.containing(Path("/pkgs/outerish/main.py")) is None


def test_sourcepath_is_read_only():
    pkg = _pkg("foo", "/pkgs/foo")
    with pytest.raises(AttributeError):
        pkg.sourcePath = Path("/elsewhere")  # type: ignore[misc]
    assert pkg.sourcePath == Path("/pkgs/foo")


def test_panel_registry_collision_keeps_first():
    panels = PanelRegistry()
    assert panels.register("foo.main", {"title": "first"})
    assert not panels.register("foo.main", {"title": "second"})
    assert panels.get("foo.main") == {"title": "first"}
    assert panels.unregister("foo.main")
    assert not panels.unregister("foo.main")
    assert len(panels) == 0
