"""Logic graph validation orchestrator.

``LogicValidator.validate_graph`` runs the built-in passes in a fixed order
and then any registered custom validators:

1. graph structure (id, emptiness, entry points)
2. every node, then every connection
3. circular dependencies, dead code, exit points, type compatibility and
   performance, each switchable through ValidationOptions
4. suggestions
5. custom validators, highest priority first

The graph is only read. Each call builds a fresh result, so repeated calls
on the same snapshot give equal but distinct results. The validator
instance holds nothing but its custom validator registrations.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Literal

import structlog

from storylogic.config import ValidationOptions
from storylogic.graph.algorithms import build_incident_count
from storylogic.graph.errors import ValidationCancelledError
from storylogic.graph.models import LogicGraph, LogicNode
from storylogic.observability.logging import get_logger
from storylogic.validation.connection_checks import build_edge_counts, validate_connection
from storylogic.validation.graph_checks import (
    check_graph_structure,
    check_performance,
    check_reachability,
    check_type_compatibility,
    detect_circular_dependencies,
    detect_dead_code,
)
from storylogic.validation.node_checks import validate_node
from storylogic.validation.suggestions import generate_suggestions
from storylogic.validation.types import LogicValidationResult, ValidationWarning

log = get_logger(__name__)

CustomValidateFn = Callable[
    [Any], Awaitable[LogicValidationResult | None] | LogicValidationResult | None
]


@dataclass
class CustomValidator:
    """A caller-supplied check run after the built-in passes.

    Attributes:
        name: Identifier shown when the validator fails.
        validate: Callable receiving the graph (``scope="graph"``) or each
            node (``scope="node"``) and returning a partial result or None.
            May be a coroutine function.
        priority: Higher priorities run first.
        category: Free-form grouping label.
        scope: What ``validate`` is called with.
    """

    name: str
    validate: CustomValidateFn
    priority: int = 0
    category: str | None = None
    scope: Literal["graph", "node"] = "graph"


class CancellationToken:
    """Cooperative cancellation flag checked between validation passes."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class LogicValidator:
    """Validates logic graph snapshots.

    Construct one per consumer; instances with different custom validator
    registrations do not affect each other.
    """

    def __init__(self, custom_validators: Iterable[CustomValidator] = ()) -> None:
        self._custom_validators: list[CustomValidator] = []
        for validator in custom_validators:
            self.register_custom_validator(validator)

    @property
    def custom_validators(self) -> list[CustomValidator]:
        """Registered custom validators in run order."""
        return list(self._custom_validators)

    def register_custom_validator(self, validator: CustomValidator) -> None:
        """Register a custom validator, keeping run order by descending priority.

        Validators with equal priority run in registration order.
        """
        self._custom_validators.append(validator)
        self._custom_validators.sort(key=lambda v: v.priority, reverse=True)

    def unregister_custom_validator(self, name: str) -> bool:
        """Remove custom validators called *name*. Returns True if any were removed."""
        before = len(self._custom_validators)
        self._custom_validators = [v for v in self._custom_validators if v.name != name]
        return len(self._custom_validators) != before

    def get_statistics(self) -> dict[str, int]:
        return {"custom_validators": len(self._custom_validators)}

    async def validate_graph(
        self,
        graph: LogicGraph | Mapping[str, Any],
        options: ValidationOptions | Mapping[str, Any] | None = None,
        *,
        cancel_token: CancellationToken | None = None,
    ) -> LogicValidationResult:
        """Validate a logic graph.

        Args:
            graph: Graph snapshot, or a raw editor payload to parse.
            options: Options, a partial options mapping, or None for defaults.
            cancel_token: Checked before each pass.

        Returns:
            The validation result; ``valid`` is True iff there are no errors.

        Raises:
            ValidationCancelledError: If ``cancel_token`` was cancelled.
            ValueError: If an options mapping holds a mistyped value.
        """
        if not isinstance(graph, LogicGraph):
            graph = LogicGraph.from_dict(dict(graph))
        opts = _resolve_options(options)

        with structlog.contextvars.bound_contextvars(graph_id=graph.id):
            return await self._run_passes(graph, opts, cancel_token)

    async def _run_passes(
        self,
        graph: LogicGraph,
        opts: ValidationOptions,
        cancel_token: CancellationToken | None,
    ) -> LogicValidationResult:
        result = LogicValidationResult()

        log.debug(
            "logic_validation_started",
            nodes=len(graph.nodes),
            connections=len(graph.connections),
        )

        passes: list[tuple[str, bool, Callable[[], LogicValidationResult]]] = [
            ("structure", True, lambda: check_graph_structure(graph)),
            ("nodes", True, lambda: _validate_nodes(graph)),
            ("connections", True, lambda: _validate_connections(graph)),
            (
                "circular_dependencies",
                opts.check_circular_dependencies,
                lambda: detect_circular_dependencies(graph),
            ),
            ("dead_code", opts.check_dead_code, lambda: detect_dead_code(graph)),
            ("reachability", opts.check_reachability, lambda: check_reachability(graph)),
            (
                "type_compatibility",
                opts.check_type_compatibility,
                lambda: check_type_compatibility(graph),
            ),
            ("performance", opts.check_performance, lambda: check_performance(graph, opts)),
            ("suggestions", True, lambda: generate_suggestions(graph)),
        ]

        for stage, enabled, run in passes:
            if not enabled:
                continue
            _raise_if_cancelled(cancel_token, graph, stage)
            fragment = run()
            log.debug(
                "logic_validation_pass",
                stage=stage,
                errors=len(fragment.errors),
                warnings=len(fragment.warnings),
            )
            result.merge(fragment)
            # Yield to the event loop between passes
            await asyncio.sleep(0)

        for validator in self._custom_validators:
            _raise_if_cancelled(cancel_token, graph, f"custom validator '{validator.name}'")
            await self._run_custom_validator(validator, graph, result)

        result.finalize()
        log.info(
            "logic_validation_complete",
            valid=result.valid,
            errors=len(result.errors),
            warnings=len(result.warnings),
            info=len(result.info),
            suggestions=len(result.suggestions),
        )
        return result

    async def _run_custom_validator(
        self,
        validator: CustomValidator,
        graph: LogicGraph,
        result: LogicValidationResult,
    ) -> None:
        subjects: list[LogicGraph | LogicNode] = (
            list(graph.nodes.values()) if validator.scope == "node" else [graph]
        )
        for subject in subjects:
            try:
                outcome = validator.validate(subject)
                if inspect.isawaitable(outcome):
                    outcome = await outcome
                if outcome is None:
                    continue
                if not isinstance(outcome, LogicValidationResult):
                    msg = f"returned {type(outcome).__name__}, expected LogicValidationResult"
                    raise TypeError(msg)
                result.merge(outcome)
            except Exception as e:
                node_id = (subject.id or None) if isinstance(subject, LogicNode) else None
                log.warning(
                    "custom_validator_failed",
                    validator=validator.name,
                    node_id=node_id,
                    error=str(e),
                )
                result.warnings.append(
                    ValidationWarning(
                        code="CUSTOM_VALIDATOR_ERROR",
                        message=f"Custom validator '{validator.name}' failed: {e}",
                        plain_message="One of the extra checks could not finish and was skipped",
                        node_id=node_id,
                    )
                )


def _resolve_options(options: ValidationOptions | Mapping[str, Any] | None) -> ValidationOptions:
    if options is None:
        return ValidationOptions()
    if isinstance(options, ValidationOptions):
        return options
    return ValidationOptions.from_dict(dict(options))


def _raise_if_cancelled(
    token: CancellationToken | None,
    graph: LogicGraph,
    stage: str,
) -> None:
    if token is not None and token.cancelled:
        log.info("logic_validation_cancelled", stage=stage)
        raise ValidationCancelledError(graph.id, stage)


def _validate_nodes(graph: LogicGraph) -> LogicValidationResult:
    result = LogicValidationResult()
    incident_counts = build_incident_count(graph)
    for node in graph.nodes.values():
        result.merge(validate_node(node, graph, incident_counts=incident_counts))
    return result


def _validate_connections(graph: LogicGraph) -> LogicValidationResult:
    result = LogicValidationResult()
    edge_counts = build_edge_counts(graph)
    for conn in graph.connections.values():
        result.merge(validate_connection(conn, graph, edge_counts=edge_counts))
    return result


async def validate_graph(
    graph: LogicGraph | Mapping[str, Any],
    options: ValidationOptions | Mapping[str, Any] | None = None,
) -> LogicValidationResult:
    """Validate *graph* with a fresh validator that has no custom validators."""
    return await LogicValidator().validate_graph(graph, options)
