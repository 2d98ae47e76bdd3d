"""Per-connection integrity checks."""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING

from storylogic.graph.models import CONDITION_WIRE_TYPES, NodeType
from storylogic.validation.types import LogicValidationResult, ValidationError, ValidationWarning

if TYPE_CHECKING:
    from storylogic.graph.models import LogicConnection, LogicGraph, LogicNode

EdgeKey = tuple[str, str, str | None, str | None]


def build_edge_counts(graph: LogicGraph) -> Counter[EdgeKey]:
    """Count connections per (source, target, source port, target port)."""
    return Counter(conn.edge_key() for conn in graph.connections.values())


def condition_wire_mismatch(
    connection: LogicConnection,
    source: LogicNode,
    *,
    code: str = "CONDITION_CONNECTION_TYPE",
) -> ValidationWarning | None:
    """Check that a wire leaving a condition node carries a boolean/condition.

    This is the only port-type rule there is. It runs from two places, the
    connection checks (``CONDITION_CONNECTION_TYPE``) and the type
    compatibility pass (``TYPE_MISMATCH``); both codes are kept because
    editor badges are keyed on them.
    """
    if source.type != NodeType.CONDITION or connection.type in CONDITION_WIRE_TYPES:
        return None
    if code == "TYPE_MISMATCH":
        return ValidationWarning(
            code=code,
            message="Condition node should use conditional or boolean connection",
            plain_message='A condition block should use "if true/false" type connections',
            connection_id=connection.id or None,
            suggestion="Change connection type to conditional or boolean",
        )
    return ValidationWarning(
        code=code,
        message="Connection from condition node should be boolean or condition type",
        plain_message="This connection from a condition should use boolean type",
        connection_id=connection.id or None,
        suggestion="Change connection type to boolean or condition",
    )


def validate_connection(
    connection: LogicConnection,
    graph: LogicGraph,
    *,
    edge_counts: Counter[EdgeKey] | None = None,
) -> LogicValidationResult:
    """Run integrity checks for a single connection.

    A connection whose endpoints are both missing yields two separate
    errors. Type rules only run when both endpoints resolve.

    Args:
        connection: Connection to check.
        graph: Graph the connection belongs to.
        edge_counts: Precomputed duplicate counts (see ``build_edge_counts``).

    Returns:
        Partial result holding this connection's findings.
    """
    result = LogicValidationResult()
    conn_id = connection.id or None

    if not connection.id:
        result.errors.append(
            ValidationError(
                code="MISSING_CONNECTION_ID",
                message="Connection is missing an ID",
                plain_message="A connection between logic blocks is missing an identifier",
            )
        )

    source = graph.nodes.get(connection.source_node_id)
    target = graph.nodes.get(connection.target_node_id)

    if source is None:
        result.errors.append(
            ValidationError(
                code="INVALID_SOURCE_NODE",
                message=f"Connection source node {connection.source_node_id} does not exist",
                plain_message="This connection starts from a logic block that doesn't exist",
                connection_id=conn_id,
            )
        )

    if target is None:
        result.errors.append(
            ValidationError(
                code="INVALID_TARGET_NODE",
                message=f"Connection target node {connection.target_node_id} does not exist",
                plain_message="This connection leads to a logic block that doesn't exist",
                connection_id=conn_id,
            )
        )

    if connection.is_self_loop:
        result.errors.append(
            ValidationError(
                code="SELF_CONNECTION",
                message="Node cannot connect to itself",
                plain_message="A logic block cannot connect to itself",
                node_id=connection.source_node_id,
                connection_id=conn_id,
            )
        )

    if edge_counts is None:
        edge_counts = build_edge_counts(graph)
    if edge_counts[connection.edge_key()] > 1:
        result.warnings.append(
            ValidationWarning(
                code="DUPLICATE_CONNECTION",
                message="Duplicate connection detected",
                plain_message="These two logic blocks are connected multiple times in the same way",
                connection_id=conn_id,
                suggestion="Remove duplicate connections",
            )
        )

    if source is not None and target is not None:
        mismatch = condition_wire_mismatch(connection, source)
        if mismatch is not None:
            result.warnings.append(mismatch)

    return result
