"""Whole-graph validation passes.

These checks need the full graph rather than a single node or connection:
entry point conventions, circular dependencies, dead code, exit points,
wire type compatibility and size/fan-out limits. All are pure functions
returning a partial LogicValidationResult.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from storylogic.graph.algorithms import (
    build_outgoing,
    find_cycles,
    longest_path_depth,
    reachable_from,
)
from storylogic.graph.models import NodeType
from storylogic.validation.connection_checks import condition_wire_mismatch
from storylogic.validation.types import (
    Fix,
    LogicValidationResult,
    ValidationError,
    ValidationInfo,
    ValidationWarning,
)

if TYPE_CHECKING:
    from storylogic.config import ValidationOptions
    from storylogic.graph.models import LogicGraph

__all__ = [
    "check_graph_structure",
    "check_performance",
    "check_reachability",
    "check_type_compatibility",
    "detect_circular_dependencies",
    "detect_dead_code",
    "format_node_path",
]

# Node types never reported as dead code
_DEAD_CODE_EXEMPT: frozenset[str] = frozenset({NodeType.START, NodeType.COMMENT})


def format_node_path(graph: LogicGraph, node_ids: list[str]) -> str:
    """Render node IDs as ``Label → Label``, falling back to IDs."""
    names = []
    for node_id in node_ids:
        node = graph.nodes.get(node_id)
        names.append(node.display_name if node else node_id)
    return " → ".join(names)


def _start_ids(graph: LogicGraph) -> list[str]:
    return [node_id for node_id, node in graph.nodes.items() if node.type == NodeType.START]


def check_graph_structure(graph: LogicGraph) -> LogicValidationResult:
    """Check graph identity, emptiness and the single-entry convention.

    An empty graph is a legitimate new graph: it only gets ``EMPTY_GRAPH``,
    not the entry point warnings.
    """
    result = LogicValidationResult()

    if not graph.id:
        result.errors.append(
            ValidationError(
                code="MISSING_GRAPH_ID",
                message="Logic graph is missing an ID",
                plain_message="The logic flow is missing an identifier",
                severity="critical",
            )
        )

    if not graph.nodes:
        result.warnings.append(
            ValidationWarning(
                code="EMPTY_GRAPH",
                message="Logic graph has no nodes",
                plain_message="The logic flow is empty",
                suggestion="Add some logic blocks to create your flow",
            )
        )
        return result

    entries = _start_ids(graph)
    if not entries:
        result.warnings.append(
            ValidationWarning(
                code="NO_ENTRY_POINT",
                message="Logic graph has no entry point",
                plain_message="Your logic flow doesn't have a starting point",
                suggestion="Add an entry node to define where your logic begins",
            )
        )
    elif len(entries) > 1:
        result.warnings.append(
            ValidationWarning(
                code="MULTIPLE_ENTRY_POINTS",
                message=f"Logic graph has multiple entry points: {', '.join(entries)}",
                plain_message="Your logic flow has more than one starting point",
                suggestion="Consider having a single entry point for clearer logic",
            )
        )
    return result


def detect_circular_dependencies(graph: LogicGraph) -> LogicValidationResult:
    """Report every cycle in the graph as a ``CIRCULAR_DEPENDENCY`` error.

    No automatic fix is offered: which edge of a loop is the mistake is a
    judgement call for the author.
    """
    result = LogicValidationResult()
    for cycle, closing in find_cycles(graph):
        rendered = format_node_path(graph, cycle)
        result.errors.append(
            ValidationError(
                code="CIRCULAR_DEPENDENCY",
                message=f"Circular dependency detected: {rendered}",
                plain_message=(
                    f"Your logic has a circular reference: these blocks form a loop: {rendered}"
                ),
                node_id=closing.source_node_id,
                connection_id=closing.id or None,
                fix=Fix(
                    description="Break the circular reference by removing one of the connections",
                    auto_fixable=False,
                ),
            )
        )
    return result


def detect_dead_code(graph: LogicGraph) -> LogicValidationResult:
    """Report nodes with no forward path from any ``start`` node.

    Skipped entirely when the graph has no ``start`` node. An isolated node
    is reported here as well as by the node checks.
    """
    result = LogicValidationResult()
    entries = _start_ids(graph)
    if not entries:
        return result

    reachable = reachable_from(graph, entries)
    for node_id, node in graph.nodes.items():
        if node_id in reachable or node.type in _DEAD_CODE_EXEMPT:
            continue
        result.warnings.append(
            ValidationWarning(
                code="UNREACHABLE_NODE",
                message=f"Node {node.display_name} is unreachable",
                plain_message=f'The logic block "{node.display_name}" can never be reached',
                node_id=node_id,
                suggestion="Connect this block to your logic flow or remove it",
            )
        )
    return result


def check_reachability(graph: LogicGraph) -> LogicValidationResult:
    """Note graphs without an explicit ``end`` node.

    This only checks that an exit exists, not that one can be reached from
    the entry point.
    """
    result = LogicValidationResult()
    if graph.nodes and not graph.nodes_of_type(NodeType.END):
        result.info.append(
            ValidationInfo(
                code="NO_EXIT_POINTS",
                message="Logic graph has no explicit exit points",
            )
        )
    return result


def check_type_compatibility(graph: LogicGraph) -> LogicValidationResult:
    """Apply the condition wire rule to every resolvable connection."""
    result = LogicValidationResult()
    for conn in graph.connections.values():
        source = graph.nodes.get(conn.source_node_id)
        if source is None or conn.target_node_id not in graph.nodes:
            continue
        mismatch = condition_wire_mismatch(conn, source, code="TYPE_MISMATCH")
        if mismatch is not None:
            result.warnings.append(mismatch)
    return result


def check_performance(graph: LogicGraph, options: ValidationOptions) -> LogicValidationResult:
    """Flag graphs that are large, wide or deep enough to slow the runtime.

    Every finding is a warning; size alone never makes a graph invalid.
    """
    result = LogicValidationResult()
    node_count = len(graph.nodes)
    connection_count = len(graph.connections)

    if node_count > options.max_node_count:
        result.warnings.append(
            ValidationWarning(
                code="TOO_MANY_NODES",
                message=(
                    f"Graph has {node_count} nodes, "
                    f"recommended maximum is {options.max_node_count}"
                ),
                plain_message=(
                    f"Your logic flow is very complex with {node_count} blocks. "
                    "This might be slow."
                ),
                suggestion="Consider breaking this into smaller, reusable logic flows",
            )
        )

    if connection_count > options.max_connection_count:
        result.warnings.append(
            ValidationWarning(
                code="TOO_MANY_CONNECTIONS",
                message=(
                    f"Graph has {connection_count} connections, "
                    f"recommended maximum is {options.max_connection_count}"
                ),
                plain_message=(
                    f"Your logic has {connection_count} connections. "
                    "This might affect performance."
                ),
                suggestion="Simplify your logic flow or break it into smaller pieces",
            )
        )

    for node_id, conns in build_outgoing(graph).items():
        if len(conns) <= options.max_branches:
            continue
        node = graph.nodes.get(node_id)
        name = node.display_name if node else node_id
        result.warnings.append(
            ValidationWarning(
                code="TOO_MANY_BRANCHES",
                message=f"Node {name} has {len(conns)} outgoing connections",
                plain_message=f'The block "{name}" branches into {len(conns)} different paths',
                node_id=node_id,
                suggestion="Consider simplifying or using a different structure",
            )
        )

    depth = longest_path_depth(graph, _start_ids(graph))
    if depth > options.max_depth:
        result.warnings.append(
            ValidationWarning(
                code="MAX_DEPTH_EXCEEDED",
                message=(
                    f"Longest path from an entry point visits {depth} nodes, "
                    f"recommended maximum is {options.max_depth}"
                ),
                plain_message=(
                    f"Your logic flow runs {depth} blocks deep. "
                    "Long chains are hard to follow and slow to run."
                ),
                suggestion="Split long chains into separate logic flows",
            )
        )

    return result
