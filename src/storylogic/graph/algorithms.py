"""Shared graph algorithms for logic validation.

Pure functions that read a LogicGraph without modifying it. Traversals are
iterative so long chains of nodes do not run into Python's recursion limit.
Connections whose endpoints do not exist are ignored by every traversal;
they are reported separately by the connection checks.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING

from storylogic.observability.logging import get_logger

if TYPE_CHECKING:
    from storylogic.graph.models import LogicConnection, LogicGraph

log = get_logger(__name__)


def build_outgoing(graph: LogicGraph) -> dict[str, list[LogicConnection]]:
    """Map each source node ID to its outgoing connections, in mapping order.

    Includes dangling connections so fan-out counts match what the editor
    shows.
    """
    outgoing: dict[str, list[LogicConnection]] = {}
    for conn in graph.connections.values():
        outgoing.setdefault(conn.source_node_id, []).append(conn)
    return outgoing


def build_incident_count(graph: LogicGraph) -> dict[str, int]:
    """Count connections touching each node ID (either endpoint)."""
    counts: dict[str, int] = {}
    for conn in graph.connections.values():
        counts[conn.source_node_id] = counts.get(conn.source_node_id, 0) + 1
        if conn.target_node_id != conn.source_node_id:
            counts[conn.target_node_id] = counts.get(conn.target_node_id, 0) + 1
    return counts


def _walkable(
    graph: LogicGraph,
    outgoing: dict[str, list[LogicConnection]],
    node_id: str,
) -> list[LogicConnection]:
    """Outgoing connections that lead to an existing node other than the source."""
    return [
        conn
        for conn in outgoing.get(node_id, [])
        if conn.target_node_id in graph.nodes and not conn.is_self_loop
    ]


def find_cycles(graph: LogicGraph) -> list[tuple[list[str], LogicConnection]]:
    """Find circular paths with a depth-first search over every component.

    Keeps a ``visited`` set and an explicit recursion stack; an edge into a
    node that is still on the stack closes a cycle. The search restarts from
    every unvisited node, so cycles in disconnected components are all found.
    Self-loops are excluded (they are a connection-level defect).

    Args:
        graph: The logic graph.

    Returns:
        One entry per distinct cycle: the closed node path (first node
        repeated at the end, e.g. ``["a", "b", "a"]``) and the connection
        that closes it.
    """
    outgoing = build_outgoing(graph)
    visited: set[str] = set()
    on_stack: set[str] = set()
    seen_paths: set[tuple[str, ...]] = set()
    cycles: list[tuple[list[str], LogicConnection]] = []

    for root in graph.nodes:
        if root in visited:
            continue
        visited.add(root)
        on_stack.add(root)
        path = [root]
        frames: list[Iterator[LogicConnection]] = [iter(_walkable(graph, outgoing, root))]

        while frames:
            conn = next(frames[-1], None)
            if conn is None:
                frames.pop()
                on_stack.discard(path.pop())
                continue

            target = conn.target_node_id
            if target in on_stack:
                cycle = [*path[path.index(target) :], target]
                key = tuple(cycle)
                if key not in seen_paths:
                    seen_paths.add(key)
                    cycles.append((cycle, conn))
            elif target not in visited:
                visited.add(target)
                on_stack.add(target)
                path.append(target)
                frames.append(iter(_walkable(graph, outgoing, target)))

    log.debug("cycle_search_complete", nodes=len(graph.nodes), cycles=len(cycles))
    return cycles


def reachable_from(graph: LogicGraph, roots: Iterable[str]) -> set[str]:
    """Return node IDs reachable by following connections forward from *roots*.

    Roots themselves are included when they exist in the graph.
    """
    outgoing = build_outgoing(graph)
    reachable: set[str] = set()
    stack = [r for r in roots if r in graph.nodes]
    while stack:
        current = stack.pop()
        if current in reachable:
            continue
        reachable.add(current)
        stack.extend(
            conn.target_node_id
            for conn in _walkable(graph, outgoing, current)
            if conn.target_node_id not in reachable
        )
    return reachable


def longest_path_depth(graph: LogicGraph, roots: Iterable[str]) -> int:
    """Length in nodes of the longest forward path starting at any root.

    Back edges (those closing a cycle) are ignored, which turns the part of
    the graph reachable from *roots* into a DAG. The longest path is then
    relaxed in reverse DFS postorder, which is a topological order of that DAG.

    Returns:
        0 if no root exists in the graph, otherwise the node count of the
        longest path.
    """
    outgoing = build_outgoing(graph)
    root_ids = [r for r in roots if r in graph.nodes]
    visited: set[str] = set()
    on_stack: set[str] = set()
    back_edges: set[tuple[str, str]] = set()
    postorder: list[str] = []

    for root in root_ids:
        if root in visited:
            continue
        visited.add(root)
        on_stack.add(root)
        path = [root]
        frames: list[Iterator[LogicConnection]] = [iter(_walkable(graph, outgoing, root))]
        while frames:
            conn = next(frames[-1], None)
            if conn is None:
                frames.pop()
                done = path.pop()
                on_stack.discard(done)
                postorder.append(done)
                continue
            target = conn.target_node_id
            if target in on_stack:
                back_edges.add((path[-1], target))
            elif target not in visited:
                visited.add(target)
                on_stack.add(target)
                path.append(target)
                frames.append(iter(_walkable(graph, outgoing, target)))

    depth: dict[str, int] = dict.fromkeys(root_ids, 1)
    for node_id in reversed(postorder):
        current = depth.get(node_id, 1)
        for conn in _walkable(graph, outgoing, node_id):
            target = conn.target_node_id
            if (node_id, target) in back_edges:
                continue
            depth[target] = max(depth.get(target, 0), current + 1)

    return max(depth.values(), default=0)
