"""Logging configuration built around structlog JSON logging."""

from __future__ import annotations

import logging
import logging.config
import os
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import structlog

_LOGGING_INITIALISED = False

LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUPS = 3

# httpx logs request URLs at INFO and Bot-API URLs carry the bot token.
# APScheduler reports skipped (still running) jobs at WARNING.
QUIET_LOGGERS = ("httpx", "httpcore", "openai", "apscheduler")


def default_log_dir() -> Path:
    env_root = os.environ.get("NEWS_RELAY_HOME")
    if env_root:
        return Path(env_root).expanduser().resolve() / "logs"
    return Path(__file__).resolve().parents[1] / "logs"


def _file_handler(path: Path, level: str) -> dict:
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "level": level,
        "filename": str(path),
        "maxBytes": LOG_FILE_MAX_BYTES,
        "backupCount": LOG_FILE_BACKUPS,
        "formatter": "json",
        "encoding": "utf-8",
    }


def configure_logging(verbose: bool = False) -> structlog.BoundLogger:
    """Configure structlog + stdlib handlers and return the relay logger.

    ``relay.log`` receives INFO and above, ``error.log`` only failures; both
    rotate so a long-running ``run`` does not fill the disk.
    """

    global _LOGGING_INITIALISED

    if not _LOGGING_INITIALISED:
        log_dir = default_log_dir()
        log_dir.mkdir(parents=True, exist_ok=True)
        level = "DEBUG" if verbose else "INFO"
        loggers = {
            "news_relay": {
                "handlers": ["console", "relay_file", "error_file"],
                "level": level,
                "propagate": False,
            }
        }
        for name in QUIET_LOGGERS:
            loggers[name] = {
                "handlers": ["console", "relay_file"],
                "level": "WARNING",
                "propagate": False,
            }
        logging.config.dictConfig(
            {
                "version": 1,
                "disable_existing_loggers": False,
                "formatters": {
                    "json": {
                        "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
                        "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s",
                    }
                },
                "handlers": {
                    "console": {
                        "class": "logging.StreamHandler",
                        "level": level,
                        "formatter": "json",
                    },
                    "relay_file": _file_handler(log_dir / "relay.log", "INFO"),
                    "error_file": _file_handler(log_dir / "error.log", "ERROR"),
                },
                "loggers": loggers,
            }
        )

        structlog.configure(
            processors=[
                # pass_id / target bound by pass_context
                structlog.contextvars.merge_contextvars,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.stdlib.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                # JSON rendering happens in the stdlib handler formatter
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        _LOGGING_INITIALISED = True
    return structlog.get_logger("news_relay")


def get_logger(component: str) -> structlog.BoundLogger:
    """Return the relay logger bound to a component name."""

    return configure_logging().bind(component=component)


@contextmanager
def pass_context(target: str) -> Iterator[str]:
    """Tag every log line emitted during one pass with ``pass_id`` and ``target``.

    Source, enricher and sink loggers pick the values up through
    ``merge_contextvars`` without being handed the pass.
    """

    pass_id = uuid.uuid4().hex[:12]
    with structlog.contextvars.bound_contextvars(pass_id=pass_id, target=target):
        yield pass_id


def tail_log(path: Path, line_count: int = 100) -> list[str]:
    """Return the last N lines from a log file."""

    if not path.exists():
        return []
    with path.open("r", encoding="utf-8", errors="ignore") as stream:
        lines = stream.readlines()
    return lines[-line_count:]


__all__ = ["configure_logging", "default_log_dir", "get_logger", "pass_context", "tail_log"]
