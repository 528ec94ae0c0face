# pkghost/core/logging/formatters.py
from __future__ import annotations

import logging

from pkghost.core.jsonutils import safeJsonDumps
from .context import getLogContext



class JsonFormatter(logging.Formatter):
    """One-line JSON records for log files."""
    def format(self, record: logging.LogRecord) -> str:
        base = {
            "ts": int(record.created * 1000),
            "level": record.levelname.lower(),
            "logger": record.name,
            "msg": record.getMessage(),
            "ctx": getLogContext() or {},
            "proc": {"pid": record.process, "name": record.processName},
        }
        warningCode = getattr(record, "warningCode", None)
        if warningCode:
            base["warningCode"] = str(warningCode)

        if record.exc_info:
            excType = record.exc_info[0]
            excValue = record.exc_info[1]
            try:
                typ = getattr(excType, "__name__", type(excType).__name__)
                msg = str(excValue)
                stack = self.formatException(record.exc_info)
            except Exception:
                typ, msg, stack = "Error", "format failed", None
            base["exc"] = {"type": typ, "message": msg, "stack": stack}

        return safeJsonDumps(base)



class DevFormatter(logging.Formatter):
    """Human-friendly console formatter (dev mode)."""
    def format(self, record: logging.LogRecord) -> str:
        ctx = getLogContext()
        ctxStr = ""
        if ctx:
            md = []
            operation = ctx.get("operation")
            packageName = ctx.get("packageName") or ctx.get("packagePath")
            if operation:
                md.append(str(operation))
            if packageName:
                md.append(str(packageName))
            if md:
                ctxStr = " [" + "/".join(md) + "]"
        msg = record.getMessage()
        warningCode = getattr(record, "warningCode", None)
        if warningCode:
            msg = f"({warningCode}) {msg}"
        if record.exc_info:
            msg += "\n" + self.formatException(record.exc_info)
        if record.stack_info:
            msg += "\n" + str(record.stack_info)
        return f"{record.levelname}: [{record.name}] {msg}{ctxStr}"
