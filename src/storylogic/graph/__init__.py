"""Graph package - logic graph snapshot models and traversal algorithms.

The editor owns and mutates the graph; everything in this package only
reads it.
"""

from storylogic.graph.algorithms import (
    build_incident_count,
    build_outgoing,
    find_cycles,
    longest_path_depth,
    reachable_from,
)
from storylogic.graph.errors import GraphLoadError, ValidationCancelledError
from storylogic.graph.io import load_graph
from storylogic.graph.models import (
    NODE_CATEGORIES,
    LogicConnection,
    LogicGraph,
    LogicNode,
    NodeCategory,
    NodeType,
    Position,
    category_for,
)

__all__ = [
    "NODE_CATEGORIES",
    "GraphLoadError",
    "LogicConnection",
    "LogicGraph",
    "LogicNode",
    "NodeCategory",
    "NodeType",
    "Position",
    "ValidationCancelledError",
    "build_incident_count",
    "build_outgoing",
    "category_for",
    "find_cycles",
    "load_graph",
    "longest_path_depth",
    "reachable_from",
]
