"""Exceptions raised around logic graph validation.

Validation findings are never raised: a malformed graph is reported in the
result. The exceptions here cover the edges of the engine, where there is no
result to report into (reading a snapshot from disk, or a run that was
cancelled by its caller).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


class GraphLoadError(Exception):
    """Raised when a graph snapshot cannot be read or parsed.

    Attributes:
        path: File the snapshot was read from.
        reason: What went wrong.
    """

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load logic graph at {path}: {reason}")


class ValidationCancelledError(Exception):
    """Raised when a validation run is cancelled through its token.

    Attributes:
        graph_id: Graph whose validation was interrupted.
        stage: Pass that was about to run when cancellation was observed.
    """

    def __init__(self, graph_id: str, stage: str = "") -> None:
        self.graph_id = graph_id
        self.stage = stage
        msg = f"Validation of graph '{graph_id or '?'}' was cancelled"
        if stage:
            msg += f" before {stage}"
        super().__init__(msg)
