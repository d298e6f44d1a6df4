from __future__ import annotations

import logging
import sys

_INSTALLED_HANDLERS: set[str] = set()


class _StderrHandler(logging.StreamHandler):
    """Stream handler bound to whatever ``sys.stderr`` is when a record is emitted."""

    def __init__(self) -> None:
        logging.Handler.__init__(self)

    @property
    def stream(self):  # type: ignore[override]
        return sys.stderr


def ensure_console_logger(
    logger: logging.Logger,
    handler_name: str,
    *,
    level: int = logging.INFO,
    fmt: str = "%(levelname)s %(name)s: %(message)s",
) -> None:
    """Attach a single named stderr handler to ``logger``.

    Repeated calls with the same ``handler_name`` only adjust the level, so
    every CLI invocation can call this unconditionally.
    """

    logger.setLevel(level)
    if handler_name in _INSTALLED_HANDLERS:
        return
    if any(getattr(handler, "name", None) == handler_name for handler in logger.handlers):
        _INSTALLED_HANDLERS.add(handler_name)
        return

    handler = _StderrHandler()
    handler.name = handler_name
    handler.setFormatter(logging.Formatter(fmt))
    logger.addHandler(handler)
    _INSTALLED_HANDLERS.add(handler_name)


__all__ = ["ensure_console_logger"]
