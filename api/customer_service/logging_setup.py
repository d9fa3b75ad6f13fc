# -*- coding: utf-8 -*-
from __future__ import annotations
import logging, logging.handlers
from pathlib import Path
from typing import Optional

LOG_FILENAME = "customer_service.log"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"

_FRAMEWORK_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi")


def _resolve_level(name: str) -> int:
    level = logging.getLevelName(str(name or "INFO").upper())
    return level if isinstance(level, int) else logging.INFO


def _is_ours(h: logging.Handler) -> bool:
    return isinstance(h, logging.handlers.RotatingFileHandler) and str(getattr(h, "baseFilename", "")).endswith(LOG_FILENAME)


def _find_handler(lg: logging.Logger) -> Optional[logging.Handler]:
    return next((h for h in lg.handlers if _is_ours(h)), None)


def setup_logging(settings) -> Path:
    """Configure rotating file logging under LOG_DIR/customer_service.log; safe to call twice."""
    log_dir = Path(settings.LOG_DIR).expanduser()
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / LOG_FILENAME
    level = _resolve_level(settings.LOG_LEVEL)

    root = logging.getLogger()
    root.setLevel(level)
    handler = _find_handler(root)
    if handler is None:
        handler = logging.handlers.RotatingFileHandler(
            log_path, maxBytes=5_000_000, backupCount=3, encoding="utf-8"
        )
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    handler.setLevel(level)

    # uvicorn configures its own loggers; attach the file handler to them too
    for name in _FRAMEWORK_LOGGERS:
        lg = logging.getLogger(name)
        lg.setLevel(level)
        if _find_handler(lg) is None:
            lg.addHandler(handler)

    logging.getLogger(__name__).debug(f"Logging to {log_path} at {logging.getLevelName(level)}")
    return log_path
