"""Observability module for StoryLogic.

Provides structured logging via structlog with rich console output.
"""

from storylogic.observability.logging import (
    close_file_logging,
    configure_logging,
    get_logger,
)

__all__ = [
    "close_file_logging",
    "configure_logging",
    "get_logger",
]
