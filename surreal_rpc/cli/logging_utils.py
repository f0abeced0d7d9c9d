"""Loguru helpers for consistent logging in CLI commands."""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

_SINK_IDS: dict[str, int] = {}

STDERR_FORMAT = "<dim>{time:HH:mm:ss.SSS}</dim> | <level>{level: <8}</level> | <level>{message}</level>"


def get_log_dir() -> Path:
    return Path.home() / ".surreal_rpc" / "logs"


def ensure_rotating_log_file(name: str, level: str = "INFO", log_dir: Path | None = None) -> Path:
    """Ensure a rotating log sink for the given command name."""
    directory = log_dir or get_log_dir()
    log_path = directory / f"{name}.log"
    if name in _SINK_IDS:
        return log_path
    directory.mkdir(parents=True, exist_ok=True)
    sink_id = logger.add(
        str(log_path),
        level=level,
        rotation="10 MB",
        retention="14 days",
        enqueue=True,
        encoding="utf-8",
        backtrace=False,
        diagnose=False,
    )
    _SINK_IDS[name] = sink_id
    return log_path


def configure_cli_logging(*, verbose: bool, logs: bool, level: str = "INFO") -> None:
    """Route surreal_rpc logs to stderr (verbose), to a log file (logs), both, or nowhere."""
    if not verbose and not logs:
        logger.disable("surreal_rpc")
        return
    logger.remove()
    _SINK_IDS.clear()
    if verbose:
        logger.add(sys.stderr, level="DEBUG", format=STDERR_FORMAT)
    if logs:
        ensure_rotating_log_file("cli", level="DEBUG" if verbose else level)
    logger.enable("surreal_rpc")
