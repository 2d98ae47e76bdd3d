"""Reading logic graph snapshots from disk."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from storylogic.graph.errors import GraphLoadError
from storylogic.graph.models import LogicGraph
from storylogic.observability.logging import get_logger

if TYPE_CHECKING:
    from pathlib import Path

log = get_logger(__name__)


def load_graph(path: Path) -> LogicGraph:
    """Load a logic graph from an editor JSON export.

    The file may contain the graph object itself or wrap it under a
    ``"graph"`` key.

    Args:
        path: JSON file to read.

    Returns:
        Parsed LogicGraph.

    Raises:
        GraphLoadError: If the file is missing, not JSON, or not a graph object.
    """
    if not path.exists():
        raise GraphLoadError(path, "File not found")

    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise GraphLoadError(path, str(e)) from e

    if isinstance(data, dict) and isinstance(data.get("graph"), dict):
        data = data["graph"]
    if not isinstance(data, dict):
        raise GraphLoadError(path, f"Expected a JSON object, got {type(data).__name__}")

    graph = LogicGraph.from_dict(data)

    log.debug(
        "graph_loaded",
        path=str(path),
        graph_id=graph.id,
        nodes=len(graph.nodes),
        connections=len(graph.connections),
    )
    return graph
