# src/pc_app/core/logging.py
from __future__ import annotations

import json
import logging
import sys

TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# third-party loggers that are chatty below INFO
QUIET_LOGGERS = ("PIL", "httpx", "multipart")


class JsonFormatter(logging.Formatter):
    """One JSON object per line; message text is escaped, not interpolated."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "level": record.levelname,
            "time": self.formatTime(record),
            "name": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "line": record.lineno,
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def configure_logging(level: int | str = logging.INFO, json: bool = False) -> None:
    """
    Configure root + uvicorn loggers. Safe to call repeatedly (API startup,
    each CLI invocation); the previous handlers are replaced.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter() if json else logging.Formatter(TEXT_FORMAT))
    logging.basicConfig(level=level, handlers=[handler], force=True)

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.INFO))


def get_logger(name: str | None = None) -> logging.Logger:
    return logging.getLogger(name or "pc_app")
