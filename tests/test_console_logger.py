from __future__ import annotations

import logging

from maplayers.utils.console_logger import ensure_console_logger


def test_handler_is_installed_once() -> None:
    logger = logging.getLogger("maplayers.tests.console-once")
    ensure_console_logger(logger, "tests-console-once")
    ensure_console_logger(logger, "tests-console-once", level=logging.DEBUG)

    named = [handler for handler in logger.handlers if handler.name == "tests-console-once"]
    assert len(named) == 1
    assert logger.level == logging.DEBUG


def test_records_follow_current_stderr(capsys) -> None:
    logger = logging.getLogger("maplayers.tests.console-stderr")
    logger.propagate = False
    ensure_console_logger(logger, "tests-console-stderr", level=logging.WARNING)

    logger.info("quiet")
    logger.warning("tile 3/4/5 failed")

    captured = capsys.readouterr()
    assert "WARNING maplayers.tests.console-stderr: tile 3/4/5 failed" in captured.err
    assert "quiet" not in captured.err
