# tests/pkghost/packages/test_unload.py
import pytest

from conftest import write_package
from pkghost.packages import PackageWarning

HOOKS_PY = """
CALLS = []


def load():
    CALLS.append("load")


def unload():
    CALLS.append("unload")


messages = {"ping": lambda: "pong"}
"""


def _host_state(manager, services):
    return {
        "packages": manager.registry.packages.paths(),
        "panels": manager.registry.panels.ids(),
        "menu": services.menu.snapshot(),
        "i18n": services.i18n.snapshot(),
        "messages": services.messages.names(),
    }


def _warning_codes(caplog):
    return [getattr(rec, "warningCode", None) for rec in caplog.records if getattr(rec, "warningCode", None)]


@pytest.mark.asyncio
async def test_load_then_unload_restores_host_state(manager, services, events, packages_root):
    services.menu.add("Tools", {"label": "Existing"})
    services.i18n.extend({"core": {"ok": "OK"}})
    before = _host_state(manager, services)

    pkg_dir = write_package(
        packages_root, "foo",
        {
            "name": "foo",
            "main": "main.py",
            "main-menu": {"Tools/Foo": {"message": "foo:ping"}},
            "panels": {"main": {}, "side": {"type": "float"}},
        },
        {"main.py": HOOKS_PY, "i18n/en.json5": "{title: 'Foo'}"},
    )
    pkg = await manager.load(pkg_dir)
    assert _host_state(manager, services) != before

    await manager.unload(pkg_dir)
    assert _host_state(manager, services) == before
    assert pkg.module.CALLS == ["load", "unload"]
    assert pkg_dir / "main.py" not in manager.modules
    assert [(env["event"], env["payload"]) for env in events] == [
        ("package:loaded", "foo"),
        ("package:unloaded", "foo"),
    ]


@pytest.mark.asyncio
async def test_unload_of_never_loaded_path_is_silent_noop(manager, events, tmp_path):
    await manager.unload(tmp_path / "never-loaded")
    assert events == []


@pytest.mark.asyncio
async def test_unload_hook_failure_is_a_warning(manager, services, events, packages_root, caplog):
    pkg_dir = write_package(
        packages_root, "foo", {"name": "foo", "main": "main.py"},
        {
            "main.py": """
            def unload():
                raise RuntimeError("cannot let go")

            messages = {"ping": lambda: "pong"}
            """,
        },
    )
    await manager.load(pkg_dir)
    with caplog.at_level("WARNING", logger="pkghost.packages"):
        await manager.unload(pkg_dir)

    assert _warning_codes(caplog) == [PackageWarning.UNLOAD_HOOK_FAILED.value]
    assert services.messages.handlers("foo:ping") == []
    assert manager.packagePath("foo") is None
    assert pkg_dir / "main.py" not in manager.modules
    assert events[-1]["event"] == "package:unloaded"


@pytest.mark.asyncio
async def test_async_unload_hook(manager, packages_root):
    pkg_dir = write_package(
        packages_root, "foo", {"name": "foo", "main": "main.py"},
        {
            "main.py": """
            STATE = []


            async def unload():
                STATE.append("bye")
            """,
        },
    )
    pkg = await manager.load(pkg_dir)
    await manager.unload(pkg_dir)
    assert pkg.module.STATE == ["bye"]


@pytest.mark.asyncio
async def test_module_already_evicted_logs_uncache_failed(manager, packages_root, caplog):
    pkg_dir = write_package(packages_root, "foo", {"name": "foo", "main": "main.py"}, {"main.py": "X = 1\n"})
    pkg = await manager.load(pkg_dir)
    manager.modules.evict(pkg.mainPath, pkg.resolvedOutputPath)

    with caplog.at_level("WARNING", logger="pkghost.packages"):
        await manager.unload(pkg_dir)
    assert _warning_codes(caplog) == [PackageWarning.UNCACHE_FAILED.value]
    assert manager.packagePath("foo") is None


@pytest.mark.asyncio
async def test_unload_leaves_other_packages_panels_alone(manager, tmp_path):
    first = write_package(tmp_path / "a", "foo", {"name": "foo", "panels": {"main": {"title": "first"}}})
    second = write_package(tmp_path / "b", "foo", {"name": "foo", "panels": {"main": {"title": "second"}}})
    await manager.load(first)
    await manager.load(second)

    await manager.unload(second)
    assert manager.panelInfo("foo.main")["title"] == "first"
    assert manager.packagePath("foo") is None
    assert manager.packageInfo(first) is not None

    await manager.unload(first)
    assert manager.panelInfo("foo.main") is None


@pytest.mark.asyncio
async def test_module_is_fresh_after_unload_and_load(manager, packages_root):
    pkg_dir = write_package(packages_root, "foo", {"name": "foo", "main": "main.py"}, {"main.py": "COUNTER = [0]\n"})
    first = await manager.load(pkg_dir)
    first.module.COUNTER[0] += 1
    await manager.unload(pkg_dir)
    second = await manager.load(pkg_dir)
    assert second.module is not first.module
    assert second.module.COUNTER == [0]


@pytest.mark.asyncio
async def test_round_trip_from_empty_menu_removes_created_submenus(manager, services, packages_root):
    before = _host_state(manager, services)
    pkg_dir = write_package(packages_root, "foo", {"name": "foo", "main-menu": {"Packages/Foo/Run": {}}})

    await manager.load(pkg_dir)
    assert services.menu.paths() == ["Packages", "Packages/Foo", "Packages/Foo/Run"]

    await manager.unload(pkg_dir)
    assert _host_state(manager, services) == before


@pytest.mark.asyncio
async def test_failing_teardown_step_does_not_block_the_rest(manager, services, events, packages_root, monkeypatch, caplog):
    pkg_dir = write_package(
        packages_root, "foo",
        {"name": "foo", "main": "main.py", "main-menu": {"Tools/Foo": {}}, "panels": {"main": {}}},
        {"main.py": HOOKS_PY, "i18n/en.json5": "{title: 'Foo'}"},
    )
    pkg = await manager.load(pkg_dir)

    def broken_remove(path):
        raise RuntimeError("menu is gone")

    monkeypatch.setattr(services.menu, "remove", broken_remove)
    with caplog.at_level("ERROR", logger="pkghost.packages"):
        await manager.unload(pkg_dir)

    assert any("Failed to remove menu Tools/Foo" in rec.getMessage() for rec in caplog.records)
    assert manager.panelInfo("foo.main") is None
    assert not services.i18n.has("foo")
    assert services.messages.handlers("foo:ping") == []
    assert pkg.module.CALLS == ["load", "unload"]
    assert manager.packagePath("foo") is None
    assert events[-1]["event"] == "package:unloaded"


@pytest.mark.asyncio
async def test_unload_survives_module_graph_and_table_errors(manager, events, packages_root, monkeypatch, caplog):
    pkg_dir = write_package(packages_root, "foo", {"name": "foo", "main": "main.py"}, {"main.py": HOOKS_PY})
    await manager.load(pkg_dir)

    def broken_contains(self, path):
        raise RuntimeError("graph unavailable")

    def broken_table_remove(path):
        raise RuntimeError("table locked")

    monkeypatch.setattr(type(manager.modules), "__contains__", broken_contains)
    monkeypatch.setattr(manager.registry.packages, "remove", broken_table_remove)
    with caplog.at_level("WARNING", logger="pkghost.packages"):
        await manager.unload(pkg_dir)

    assert _warning_codes(caplog) == [PackageWarning.UNCACHE_FAILED.value]
    assert any("Failed to drop foo from the package table" in rec.getMessage() for rec in caplog.records)
    assert events[-1]["event"] == "package:unloaded"
