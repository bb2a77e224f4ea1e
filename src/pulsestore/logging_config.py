"""
Logging configuration for pulsestore.

The library only emits records through module loggers; applications opt in
to output with the helpers below.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

OPS_LOG_FILENAME = "pulsestore-ops.log"


def enable_debug_mode() -> None:
    """Enable debug-level logging to stderr."""
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Add stderr handler if not already present
    if not any(isinstance(h, logging.StreamHandler) and h.stream == sys.stderr
               for h in root_logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
            datefmt="%H:%M:%S"
        ))
        root_logger.addHandler(handler)

    logging.getLogger("pulsestore").setLevel(logging.DEBUG)
    # Pillow's plugin probing is noisy at DEBUG
    logging.getLogger("PIL").setLevel(logging.INFO)


def configure_ops_log(data_dir: Path | str) -> RotatingFileHandler:
    """Configure a persistent operations log under the data directory.

    Writes to {data_dir}/pulsestore-ops.log using a rotating file handler
    (1MB max, 3 backups). Returns the handler so it can be removed later.
    """
    log_dir = Path(data_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        str(log_dir / OPS_LOG_FILENAME),
        maxBytes=1_000_000,
        backupCount=3,
    )
    handler.setLevel(logging.INFO)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s %(levelname)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))

    pulsestore_logger = logging.getLogger("pulsestore")
    pulsestore_logger.addHandler(handler)
    if pulsestore_logger.level == logging.NOTSET or pulsestore_logger.level > logging.INFO:
        pulsestore_logger.setLevel(logging.INFO)

    return handler
