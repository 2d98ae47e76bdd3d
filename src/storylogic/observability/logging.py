"""Structured logging for StoryLogic.

Engine modules log through structlog loggers that wrap plain stdlib loggers
under the ``storylogic`` namespace. Importing the library configures nothing:
an embedding application routes the events with its own ``logging`` setup.
Context bound with ``structlog.contextvars`` (the validator binds
``graph_id`` for the length of a run) is merged into every event.

The CLI calls ``configure_logging`` to attach handlers:
- Console: rich handler on stderr, level chosen by -v
- File: every event as JSON lines in {log_dir}/logs/debug.jsonl (--log)
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path  # noqa: TC003 - Used at runtime for path operations
from typing import TYPE_CHECKING, Any

import structlog
from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from structlog.typing import EventDict, Processor, WrappedLogger

_file_handler: logging.FileHandler | None = None

_PROCESSORS: list[Processor] = [
    structlog.stdlib.filter_by_level,
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
]


class JSONLFileHandler(logging.FileHandler):
    """File handler writing one JSON object per event."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            entry: dict[str, Any] = {
                "timestamp": datetime.now(UTC).isoformat(),
                "level": record.levelname,
                "logger": record.name,
            }

            # wrap_for_formatter hands the event dict over as record.msg
            if isinstance(record.msg, dict):
                event_dict = dict(record.msg)
                event_dict.pop("level", None)
                event_dict.pop("timestamp", None)
                entry["message"] = event_dict.pop("event", "")
                entry.update(event_dict)
            else:
                entry["message"] = record.getMessage()

            if self.stream:
                self.stream.write(json.dumps(entry, default=str) + "\n")
                self.stream.flush()
        except Exception:
            self.handleError(record)


def _drop_console_keys(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
    """Rich already prints the level and time column."""
    event_dict.pop("level", None)
    event_dict.pop("timestamp", None)
    return event_dict


def configure_logging(
    verbosity: int = 0,
    log_to_file: bool = False,
    log_dir: Path | None = None,
) -> None:
    """Attach StoryLogic's console (and optional file) handlers to the root logger.

    Args:
        verbosity: 0=WARNING (default), 1=INFO, 2+=DEBUG on the console.
        log_to_file: If True, also write every event to {log_dir}/logs/debug.jsonl.
        log_dir: Base directory for file logging. Required if log_to_file=True.

    Raises:
        ValueError: If log_to_file=True but log_dir is not provided.
    """
    global _file_handler

    if log_to_file and log_dir is None:
        raise ValueError("log_dir is required when log_to_file=True")

    close_file_logging()

    levels = {0: logging.WARNING, 1: logging.INFO}
    console_level = levels.get(verbosity, logging.DEBUG)

    console_handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        show_time=verbosity >= 1,
        show_path=verbosity >= 2,
        markup=False,
        level=console_level,
    )
    console_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _drop_console_keys,
                structlog.dev.ConsoleRenderer(colors=False),
            ],
        )
    )
    handlers: list[logging.Handler] = [console_handler]

    if log_to_file and log_dir is not None:
        logs_dir = log_dir / "logs"
        logs_dir.mkdir(parents=True, exist_ok=True)
        _file_handler = JSONLFileHandler(str(logs_dir / "debug.jsonl"), mode="a")
        _file_handler.setLevel(logging.DEBUG)
        handlers.append(_file_handler)

    root_level = logging.DEBUG if (verbosity > 0 or log_to_file) else logging.WARNING
    logging.basicConfig(level=root_level, format="%(message)s", handlers=handlers, force=True)

    # asyncio emits selector chatter at DEBUG
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structured logger over the stdlib logger *name*.

    Levels and handlers are whatever the stdlib logging tree says; events
    below the logger's effective level are dropped before any processing.
    """
    logger: structlog.stdlib.BoundLogger = structlog.wrap_logger(
        logging.getLogger(name),
        processors=_PROCESSORS,
        wrapper_class=structlog.stdlib.BoundLogger,
    )
    return logger


def close_file_logging() -> None:
    """Close the JSONL file handler, if one is open."""
    global _file_handler
    if _file_handler is not None:
        _file_handler.close()
        _file_handler = None
