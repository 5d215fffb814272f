"""Tests for logging setup."""

import logging

from app.core import logging_config


def test_setup_logging_writes_rotating_file(tmp_path, monkeypatch):
    monkeypatch.setattr(logging_config, "_configured", False)
    root = logging.getLogger()
    before = list(root.handlers)
    old_level = root.level
    try:
        logging_config.setup_logging(level="debug", log_dir=str(tmp_path))
        assert root.level == logging.DEBUG
        logging_config.get_logger("grades.test").info("hello from the test")
        for h in root.handlers:
            h.flush()
        assert "hello from the test" in (tmp_path / "app.log").read_text()
    finally:
        for h in root.handlers[:]:
            if h not in before:
                root.removeHandler(h)
                h.close()
        root.setLevel(old_level)


def test_setup_logging_is_idempotent(monkeypatch):
    monkeypatch.setattr(logging_config, "_configured", True)
    root = logging.getLogger()
    count = len(root.handlers)
    logging_config.setup_logging()
    assert len(root.handlers) == count
