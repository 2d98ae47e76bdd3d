"""Advisory suggestions for simplifying a logic graph.

Suggestions are heuristics; they never affect validity.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from storylogic.graph.algorithms import build_outgoing
from storylogic.graph.models import ACTION_TYPES, NodeType
from storylogic.validation.types import LogicValidationResult, Suggestion

if TYPE_CHECKING:
    from storylogic.graph.models import LogicGraph

# Graphs above this size should carry comment nodes
COMMENT_THRESHOLD = 20


def generate_suggestions(graph: LogicGraph) -> LogicValidationResult:
    """Propose merges of chained action nodes and documentation for large graphs."""
    result = LogicValidationResult()
    outgoing = build_outgoing(graph)

    for node_id, node in graph.nodes.items():
        if node.type not in ACTION_TYPES:
            continue
        conns = outgoing.get(node_id, [])
        if len(conns) != 1:
            continue
        target = graph.nodes.get(conns[0].target_node_id)
        if target is not None and target.type in ACTION_TYPES:
            result.suggestions.append(
                Suggestion(
                    type="simplification",
                    message="These sequential action blocks could be combined into one",
                    node_id=node_id,
                    action="Combine sequential actions",
                )
            )

    if len(graph.nodes) > COMMENT_THRESHOLD and not graph.nodes_of_type(NodeType.COMMENT):
        result.suggestions.append(
            Suggestion(
                type="best-practice",
                message="Consider adding comment blocks to document your complex logic flow",
                action="Add documentation comments",
            )
        )

    return result
