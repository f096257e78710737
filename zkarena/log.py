"""
Process-wide logging setup for zkarena.

Library modules only call ``logging.getLogger(__name__)``; entry points
(``app.py``, scripts) call :func:`configure` once at start-up.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
_HANDLER_NAME = "zkarena"


def configure(level: str = "INFO", stream=None) -> logging.Logger:
    """Attach one concise text handler to the ``zkarena`` logger. Idempotent."""
    logger = logging.getLogger("zkarena")
    logger.setLevel(level.upper())
    for handler in logger.handlers:
        if handler.get_name() == _HANDLER_NAME:
            handler.setLevel(level.upper())
            return logger

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(_FORMAT))
    handler.setLevel(level.upper())
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def short_hex(data: Optional[bytes], n: int = 8) -> str:
    """Abbreviated hex for log lines."""
    if data is None:
        return "-"
    return data.hex()[: n * 2]
