from __future__ import annotations

import logging
import sys

PACKAGE_LOGGER = "task_api"


def setup_logging(level: str = "INFO") -> logging.Logger:
    """
    Configure the task_api package logger with a stderr handler.

    The root logger is left alone so an embedding server (uvicorn, gunicorn)
    keeps control of its own handlers. Safe to call more than once; the
    handler is only attached the first time, later calls just adjust the level.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    if not any(getattr(h, "_task_api", False) for h in logger.handlers):
        fmt = logging.Formatter(
            fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(fmt)
        handler._task_api = True  # type: ignore[attr-defined]
        logger.addHandler(handler)

    return logger
