# pkghost/api/routes.py
from __future__ import annotations

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse

from pkghost.app.globals import getPackageManager
from pkghost.packages import PackageError

router = APIRouter(prefix="/packages", tags=["packages"])



@router.get("")
async def listPackages():
    return JSONResponse(getPackageManager().packageInfos(), status_code=200)



@router.get("/{name}")
async def getPackage(name: str):
    manager = getPackageManager()
    path = manager.packagePath(name)
    pkg = manager.packageInfo(path) if path is not None else None
    if pkg is None:
        return {"path": "", "builtin": False, "enabled": True, "info": None}
    return manager.packageDescriptor(pkg)



@router.post("/{name}/reload")
async def reloadPackage(name: str):
    manager = getPackageManager()
    path = manager.packagePath(name)
    if path is None:
        raise HTTPException(status_code=404, detail=f"Package '{name}' is not loaded")
    try:
        pkg = await manager.reload(path)
    except PackageError as err:
        raise HTTPException(status_code=500, detail=str(err)) from err
    return {"ok": True, "name": name, "path": str(pkg.sourcePath) if pkg is not None else None}
