# tests/pkghost/api/test_routes.py
import asyncio

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from conftest import write_package
from pkghost.api.routes import router
from pkghost.app.context import PROCESS_REGISTRY
from pkghost.app.globals import PACKAGE_MANAGER_KEY


@pytest.fixture()
def client(manager):
    PROCESS_REGISTRY.register(PACKAGE_MANAGER_KEY, manager, overwrite=True)
    app = FastAPI()
    app.include_router(router)
    yield TestClient(app)
    PROCESS_REGISTRY.unregister(PACKAGE_MANAGER_KEY)


def test_list_and_get(client, manager, packages_root):
    pkg_dir = write_package(packages_root, "foo", {"name": "foo", "version": "1.0.0"})
    asyncio.run(manager.load(pkg_dir))

    res = client.get("/packages")
    assert res.status_code == 200
    assert [item["info"]["name"] for item in res.json()] == ["foo"]

    res = client.get("/packages/foo")
    assert res.status_code == 200
    assert res.json()["path"] == str(pkg_dir)

    res = client.get("/packages/ghost")
    assert res.json() == {"path": "", "builtin": False, "enabled": True, "info": None}


def test_reload(client, manager, events, packages_root):
    pkg_dir = write_package(packages_root, "foo", {"name": "foo"})
    asyncio.run(manager.load(pkg_dir))

    res = client.post("/packages/foo/reload")
    assert res.status_code == 200
    assert res.json() == {"ok": True, "name": "foo", "path": str(pkg_dir)}
    assert [env["event"] for env in events] == ["package:loaded", "package:unloaded", "package:loaded"]


def test_reload_unknown_is_404(client):
    res = client.post("/packages/ghost/reload")
    assert res.status_code == 404


def test_reload_failure_is_500(client, manager, packages_root):
    pkg_dir = write_package(packages_root, "foo", {"name": "foo", "main": "main.py"}, {"main.py": "X = 1\n"})
    asyncio.run(manager.load(pkg_dir))
    (pkg_dir / "main.py").write_text("raise RuntimeError('nope, not today')\n", encoding="utf-8")

    res = client.post("/packages/foo/reload")
    assert res.status_code == 500
    assert "Failed to load main file" in res.json()["detail"]


def test_missing_manager_raises():
    PROCESS_REGISTRY.unregister(PACKAGE_MANAGER_KEY)
    app = FastAPI()
    app.include_router(router)
    with pytest.raises(RuntimeError, match="initPackageManager"):
        TestClient(app).get("/packages")
