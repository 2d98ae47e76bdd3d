"""Per-node structural checks.

Each node is checked for its identity fields, then dispatched on its type's
category to a content check. Sequence and parallel nodes (``loop``,
``and-gate``, ``or-gate``) have no content check yet: counting their branches
needs port multiplicity data the editor does not export.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from storylogic.graph.algorithms import build_incident_count
from storylogic.graph.models import NodeCategory, NodeType, category_for
from storylogic.validation.types import (
    Fix,
    LogicValidationResult,
    ValidationError,
    ValidationInfo,
    ValidationWarning,
)

if TYPE_CHECKING:
    from storylogic.graph.models import LogicGraph, LogicNode

# Node types that may legitimately have no connections
_ISOLATION_EXEMPT: frozenset[str] = frozenset({NodeType.START, NodeType.COMMENT})


def _check_condition(node: LogicNode, result: LogicValidationResult) -> None:
    if not node.condition and not node.config:
        result.errors.append(
            ValidationError(
                code="MISSING_CONDITION",
                message="Condition node is missing a condition",
                plain_message="This condition block doesn't have a condition set",
                node_id=node.id or None,
                fix=Fix(description="Add a condition to this block", auto_fixable=False),
            )
        )


def _check_action(node: LogicNode, result: LogicValidationResult) -> None:
    if not node.config:
        result.warnings.append(
            ValidationWarning(
                code="MISSING_ACTION",
                message="Action node is missing configuration",
                plain_message="This action block doesn't specify what action to perform",
                node_id=node.id or None,
                suggestion="Define what this block should do",
            )
        )


def _check_variable(node: LogicNode, result: LogicValidationResult) -> None:
    if not node.config.get("variableId"):
        result.errors.append(
            ValidationError(
                code="MISSING_VARIABLE",
                message="Variable node is missing a variable reference",
                plain_message="This variable block doesn't reference any variable",
                node_id=node.id or None,
            )
        )


def _check_event(node: LogicNode, result: LogicValidationResult) -> None:
    if not node.config.get("eventType"):
        result.warnings.append(
            ValidationWarning(
                code="MISSING_EVENT_TYPE",
                message="Event node is missing an event type",
                plain_message="This event block doesn't specify what event to handle",
                node_id=node.id or None,
            )
        )


def _check_custom(node: LogicNode, result: LogicValidationResult) -> None:
    result.info.append(
        ValidationInfo(
            code="CUSTOM_NODE",
            message=f"Custom node type: {node.display_name}",
            node_id=node.id or None,
        )
    )


def _no_content_check(node: LogicNode, result: LogicValidationResult) -> None:
    return None


CATEGORY_CHECKS: dict[NodeCategory, Callable[[LogicNode, LogicValidationResult], None]] = {
    NodeCategory.CONDITION: _check_condition,
    NodeCategory.ACTION: _check_action,
    NodeCategory.VARIABLE: _check_variable,
    NodeCategory.EVENT: _check_event,
    NodeCategory.CUSTOM: _check_custom,
    # Branch multiplicity is not tracked yet
    NodeCategory.SEQUENCE: _no_content_check,
    NodeCategory.PARALLEL: _no_content_check,
    NodeCategory.TERMINAL: _no_content_check,
    NodeCategory.COMMENT: _no_content_check,
}


def validate_node(
    node: LogicNode,
    graph: LogicGraph,
    *,
    incident_counts: dict[str, int] | None = None,
) -> LogicValidationResult:
    """Run structural checks for a single node.

    Args:
        node: Node to check.
        graph: Graph the node belongs to (read for connection counts).
        incident_counts: Precomputed connection counts per node ID. Computed
            from ``graph`` when omitted; pass it when checking many nodes.

    Returns:
        Partial result holding this node's findings.
    """
    result = LogicValidationResult()
    node_id = node.id or None

    if not node.id:
        result.errors.append(
            ValidationError(
                code="MISSING_NODE_ID",
                message="Logic node is missing an ID",
                plain_message="This logic block is missing an identifier",
                severity="critical",
            )
        )

    if not node.type:
        result.errors.append(
            ValidationError(
                code="MISSING_NODE_TYPE",
                message="Logic node is missing a type",
                plain_message="This logic block doesn't have a type specified",
                node_id=node_id,
                severity="critical",
            )
        )
    else:
        category = category_for(node.type)
        if category is None:
            result.warnings.append(
                ValidationWarning(
                    code="UNKNOWN_NODE_TYPE",
                    message=f"Unknown node type: {node.type}",
                    plain_message=f"This logic block type '{node.type}' is not recognized",
                    node_id=node_id,
                    suggestion="Check if the node type is correctly specified",
                )
            )
        else:
            CATEGORY_CHECKS[category](node, result)

    if node.position is None:
        result.warnings.append(
            ValidationWarning(
                code="INVALID_NODE_POSITION",
                message="Node has invalid position",
                plain_message="This logic block is not properly positioned on the canvas",
                node_id=node_id,
            )
        )

    if incident_counts is None:
        incident_counts = build_incident_count(graph)
    if not incident_counts.get(node.id, 0) and node.type not in _ISOLATION_EXEMPT:
        result.warnings.append(
            ValidationWarning(
                code="ISOLATED_NODE",
                message="Node is not connected to any other nodes",
                plain_message="This logic block is not connected to anything",
                node_id=node_id,
                suggestion="Connect this block to your logic flow or remove it",
            )
        )

    return result
