"""Tests for logging setup."""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

from line_clamp import logging_setup


def test_default_log_dir_uses_local_appdata(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("LOCALAPPDATA", str(tmp_path))
    assert logging_setup._default_log_dir() == tmp_path / "LineClamp" / "logs"


def test_default_log_dir_falls_back_to_home(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.delenv("LOCALAPPDATA", raising=False)
    monkeypatch.setattr(logging_setup.Path, "home", lambda: tmp_path)
    assert logging_setup._default_log_dir() == tmp_path / ".line_clamp" / "logs"


def test_init_logging_creates_handlers(monkeypatch, tmp_path: Path) -> None:
    log_dir = tmp_path / "logs"
    monkeypatch.setattr(logging_setup, "_default_log_dir", lambda: log_dir)
    root = logging.getLogger()
    original_handlers = list(root.handlers)
    root.handlers.clear()
    try:
        log_path = logging_setup.init_logging()
        assert log_path == log_dir / "app.log"
        assert any(
            isinstance(h, logging.handlers.RotatingFileHandler) for h in root.handlers
        )
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers = original_handlers


def test_init_logging_quiet_console(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr(logging_setup, "_default_log_dir", lambda: tmp_path)
    root = logging.getLogger()
    original_handlers = list(root.handlers)
    root.handlers.clear()
    try:
        logging_setup.init_logging(console_level=logging.WARNING)
        streams = [
            h
            for h in root.handlers
            if isinstance(h, logging.StreamHandler)
            and not isinstance(h, logging.FileHandler)
        ]
        assert streams and all(h.level == logging.WARNING for h in streams)
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers = original_handlers


def test_init_logging_invalid_level_defaults(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("LINE_CLAMP_LOG_LEVEL", "notalevel")
    monkeypatch.setattr(logging_setup, "_default_log_dir", lambda: tmp_path)
    root = logging.getLogger()
    original_handlers = list(root.handlers)
    original_level = root.level
    root.handlers.clear()
    try:
        logging_setup.init_logging()
        assert root.level == logging.INFO
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers = original_handlers
        root.setLevel(original_level)


def test_set_console_level_adjusts_stream_only(tmp_path: Path) -> None:
    root = logging.getLogger()
    original_handlers = list(root.handlers)
    root.handlers.clear()
    try:
        stream_handler = logging.StreamHandler()
        file_handler = logging.FileHandler(tmp_path / "app.log")
        stream_handler.setLevel(logging.INFO)
        file_handler.setLevel(logging.INFO)
        root.addHandler(stream_handler)
        root.addHandler(file_handler)
        logging_setup.set_console_level(logging.ERROR)
        assert stream_handler.level == logging.ERROR
        assert file_handler.level == logging.INFO
        file_handler.close()
    finally:
        root.handlers = original_handlers


def test_init_logging_falls_back_without_log_dir(monkeypatch, tmp_path: Path) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("", encoding="utf-8")
    monkeypatch.setattr(logging_setup, "_default_log_dir", lambda: blocker / "logs")
    root = logging.getLogger()
    original_handlers = list(root.handlers)
    root.handlers.clear()
    try:
        logging_setup.init_logging(console_level=logging.ERROR)
        assert not any(
            isinstance(h, logging.handlers.RotatingFileHandler) for h in root.handlers
        )
        consoles = [h for h in root.handlers if logging_setup._is_console(h)]
        assert len(consoles) == 1
        assert consoles[0].level == logging.ERROR
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers = original_handlers
