"""Logging configuration for Droip Bridge with log rotation.

The MCP server speaks JSON-RPC over stdout, so nothing may log there. All
components log through the `droip_bridge` logger, which writes to a rotating
file under the data directory.

Log Rotation Policy:
- Max file size: 10 MB per log file
- Backup count: 5 (keeps droip-bridge.log, .1, ..., .5)
- Total max disk usage: ~60 MB for logs
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

DEFAULT_LOG_FILE = "droip-bridge.log"
DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10 MB per file
DEFAULT_BACKUP_COUNT = 5
DEFAULT_LOG_LEVEL = logging.INFO
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_configured = False


def get_default_log_dir() -> str:
    """Log directory, respecting the DROIP_BRIDGE_DATA_DIR env var."""
    data_dir = os.environ.get("DROIP_BRIDGE_DATA_DIR")
    if data_dir:
        return str(Path(data_dir) / "logs")
    return "~/.droip-bridge/logs"


def configure_logging(
    log_dir: str | None = None,
    log_file: str = DEFAULT_LOG_FILE,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    log_level: int = DEFAULT_LOG_LEVEL,
    log_format: str = DEFAULT_LOG_FORMAT,
    console_output: bool = False,
) -> logging.Logger:
    """Configure Droip Bridge logging with automatic log rotation.

    Args:
        log_dir: Directory for log files (default: ~/.droip-bridge/logs)
        log_file: Log file name
        max_bytes: Maximum size per log file before rotation
        backup_count: Number of backup files to keep
        log_level: Logging level
        log_format: Log message format
        console_output: Also log to stderr. Never enable stdout logging for
            the MCP server; stdout carries the protocol stream.

    Returns:
        The root droip_bridge logger.
    """
    global _configured

    log_path = Path(os.path.expanduser(log_dir or get_default_log_dir()))
    log_path.mkdir(parents=True, exist_ok=True)
    full_log_path = log_path / log_file

    root_logger = logging.getLogger("droip_bridge")
    root_logger.setLevel(log_level)

    # Clear existing handlers to avoid duplicates on reconfiguration
    root_logger.handlers.clear()

    formatter = logging.Formatter(log_format)

    file_handler = RotatingFileHandler(
        full_log_path,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    file_handler.setLevel(log_level)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    if console_output:
        # StreamHandler defaults to stderr
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    root_logger.propagate = False

    _configured = True

    root_logger.info(
        f"Logging configured: file={full_log_path}, "
        f"max_size={max_bytes // (1024*1024)}MB, "
        f"backups={backup_count}"
    )

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a component (e.g. 'server', 'persistence').

    Auto-configures file-only logging on first use.
    """
    if not _configured:
        configure_logging(console_output=False)

    return logging.getLogger(f"droip_bridge.{name}")


def set_log_level(level: int | str) -> None:
    """Change the log level for all Droip Bridge loggers."""
    if isinstance(level, str):
        level = getattr(logging, level.upper())

    root_logger = logging.getLogger("droip_bridge")
    root_logger.setLevel(level)
    for handler in root_logger.handlers:
        handler.setLevel(level)
