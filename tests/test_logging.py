"""Tests for logging configuration."""

import contextlib
import logging
import logging.handlers

from voltnet.logging import LOG_FILE_NAME, configure_logging, resolve_level


@contextlib.contextmanager
def preserved_root_logger():
    """Restore the root logger's handlers and level on exit."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    try:
        yield root
    finally:
        for handler in root.handlers[:]:
            root.removeHandler(handler)
            if handler not in handlers:
                handler.close()
        for handler in handlers:
            root.addHandler(handler)
        root.setLevel(level)


def test_resolve_level(monkeypatch):
    monkeypatch.setenv("VOLTNET_LOG_LEVEL", "debug")
    assert resolve_level() == logging.DEBUG

    monkeypatch.setenv("VOLTNET_LOG_LEVEL", "chatty")
    assert resolve_level() == logging.INFO


def test_configure_logging_writes_file(tmp_path, monkeypatch):
    monkeypatch.setenv("VOLTNET_LOG_LEVEL", "WARNING")

    with preserved_root_logger() as root:
        configure_logging(tmp_path / "logs")
        configure_logging(tmp_path / "logs")
        logging.getLogger("voltnet.test").warning("meter offline")
        for handler in root.handlers:
            handler.flush()

        assert root.level == logging.WARNING
        assert len(root.handlers) == 2
        assert any(isinstance(h, logging.handlers.RotatingFileHandler) for h in root.handlers)

    content = (tmp_path / "logs" / LOG_FILE_NAME).read_text(encoding="utf-8")
    assert "WARNING [voltnet.test] meter offline" in content


def test_quiets_aiohttp_above_debug(monkeypatch):
    monkeypatch.setenv("VOLTNET_LOG_LEVEL", "INFO")

    with preserved_root_logger() as root:
        configure_logging()

        assert logging.getLogger("aiohttp").level == logging.WARNING
        assert len(root.handlers) == 1
