"""Logging setup shared by the CLI commands."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from .config import LoggingConfig

logger = logging.getLogger("geo-tutor")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(config: LoggingConfig, verbose: bool = False) -> None:
    """Console handler on stderr plus a best-effort rotating log file.

    The console only shows warnings unless ``verbose`` is set, so the
    live thinking display is not interleaved with log noise. The file
    always receives the configured level for post-mortem diagnosis.
    """
    level = getattr(logging, config.level.upper(), logging.INFO)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(logging.DEBUG if verbose else logging.WARNING)
    console.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    handlers: list[logging.Handler] = [console]
    file_error = ""

    if config.file:
        log_path = Path(config.file).expanduser()
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            from logging.handlers import RotatingFileHandler

            file_handler = RotatingFileHandler(
                log_path,
                maxBytes=5 * 1024 * 1024,
                backupCount=2,
            )
            file_handler.setLevel(level)
            file_handler.setFormatter(
                logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
            )
            handlers.append(file_handler)
        except OSError as e:
            file_error = f"{log_path}: {e}"

    logging.basicConfig(
        level=logging.DEBUG if verbose else level, handlers=handlers, force=True
    )
    for noisy in ("httpcore", "httpx", "urllib3", "asyncio", "google_genai"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
    if file_error:
        logger.warning("Log file disabled (%s)", file_error)
