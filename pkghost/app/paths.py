# pkghost/app/paths.py
from __future__ import annotations
import os
from pathlib import Path



PKGHOST_DIR = Path(__file__).resolve().parent.parent   # pkghost/
ROOT_DIR = PKGHOST_DIR.parent                           # repository root
BUILTIN_DIR = ROOT_DIR / "builtin"                      # packages shipped with the host



def userSettingsPath() -> Path:
    override = os.environ.get("PKGHOST_SETTINGS")
    if override:
        return Path(override).expanduser()
    return Path(os.path.expanduser("~/.pkghost/settings.json5"))
