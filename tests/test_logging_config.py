"""Tests for pulsestore.logging_config."""

import logging
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

from pulsestore.logging_config import OPS_LOG_FILENAME, configure_ops_log, enable_debug_mode


@pytest.fixture
def restore_loggers() -> Iterator[None]:
    root = logging.getLogger()
    package = logging.getLogger("pulsestore")
    pil = logging.getLogger("PIL")
    saved = (root.level, list(root.handlers), package.level, list(package.handlers), pil.level)
    yield
    for handler in package.handlers:
        if handler not in saved[3]:
            handler.close()
    root.setLevel(saved[0])
    root.handlers[:] = saved[1]
    package.setLevel(saved[2])
    package.handlers[:] = saved[3]
    pil.setLevel(saved[4])


@pytest.mark.usefixtures("restore_loggers")
def test_ops_log_receives_package_records(tmp_path: Path) -> None:
    handler = configure_ops_log(tmp_path / "data")

    logging.getLogger("pulsestore.documents").info("Saved %d documents", 3)
    handler.flush()

    log_file = tmp_path / "data" / OPS_LOG_FILENAME
    assert log_file.is_file()
    assert "INFO Saved 3 documents" in log_file.read_text()
    assert handler.maxBytes == 1_000_000
    assert handler.backupCount == 3


@pytest.mark.usefixtures("restore_loggers")
def test_ops_log_skips_debug_records(tmp_path: Path) -> None:
    handler = configure_ops_log(tmp_path)
    logging.getLogger("pulsestore.blobs._file").debug("Wrote blob")
    handler.flush()
    assert "Wrote blob" not in (tmp_path / OPS_LOG_FILENAME).read_text()


@pytest.mark.usefixtures("restore_loggers")
def test_enable_debug_mode_is_idempotent() -> None:
    enable_debug_mode()
    enable_debug_mode()

    root = logging.getLogger()
    stderr_handlers = [
        handler
        for handler in root.handlers
        if isinstance(handler, logging.StreamHandler) and handler.stream == sys.stderr
    ]
    assert len(stderr_handlers) == 1
    assert logging.getLogger("pulsestore").level == logging.DEBUG
    assert logging.getLogger("PIL").level == logging.INFO
