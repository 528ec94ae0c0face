# pkghost/core/logging/context.py
from __future__ import annotations
import contextvars

# Lifecycle operations enrich this with the package being processed.
_logContextVar: contextvars.ContextVar[dict[str, object] | None] = contextvars.ContextVar("pkghost.logctx", default=None)

def setLogContext(**kvs) -> contextvars.Token:
    """Set or update per-log context values (packageName, packagePath, operation, etc.)."""
    current = dict(_logContextVar.get() or {}) # use copy
    for key, value in kvs.items():
        if value is not None:
            current[key] = value
    return _logContextVar.set(current)

def resetLogContext(token: contextvars.Token) -> None:
    """Restore the context that was active before the matching setLogContext()."""
    _logContextVar.reset(token)

def clearLogContext():
    _logContextVar.set(None)

def getLogContext():
    """Return current context dict or None."""
    return _logContextVar.get()
