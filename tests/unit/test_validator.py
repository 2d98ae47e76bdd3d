"""Tests for the validation orchestrator."""

from __future__ import annotations

import pytest

from storylogic.config import ValidationOptions
from storylogic.graph.errors import ValidationCancelledError
from storylogic.graph.models import LogicGraph, LogicNode
from storylogic.validation import (
    CancellationToken,
    CustomValidator,
    LogicValidationResult,
    LogicValidator,
    ValidationInfo,
    ValidationWarning,
    validate_graph,
)
from storylogic.validation.types import ValidationError
from tests.fixtures.graph_fixtures import make_chain, make_connection, make_graph, make_node


@pytest.mark.asyncio
async def test_story_graph_is_clean(story_graph: LogicGraph) -> None:
    result = await validate_graph(story_graph)
    assert result.valid is True
    assert result.errors == []
    assert result.warnings == []
    assert result.info == []
    assert result.suggestions == []


@pytest.mark.asyncio
async def test_idempotent() -> None:
    graph = make_graph(
        [make_node("A", "custom"), make_node("B", "condition")],
        [make_connection("c1", "A", "B"), make_connection("c2", "B", "A")],
    )
    validator = LogicValidator()
    first = await validator.validate_graph(graph)
    second = await validator.validate_graph(graph)
    assert first == second
    assert first is not second
    assert first.to_dict() == second.to_dict()


@pytest.mark.asyncio
async def test_graph_is_not_mutated(story_graph: LogicGraph) -> None:
    before = story_graph.model_dump()
    await validate_graph(story_graph)
    assert story_graph.model_dump() == before


@pytest.mark.asyncio
async def test_empty_graph() -> None:
    result = await validate_graph({"id": "fresh", "nodes": {}, "connections": {}})
    assert result.valid is True
    assert result.codes() == ["EMPTY_GRAPH"]
    assert result.suggestions == []


@pytest.mark.asyncio
async def test_missing_connections_defaults_to_empty() -> None:
    result = await validate_graph({"id": "fresh", "nodes": {}})
    assert result.codes() == ["EMPTY_GRAPH"]


@pytest.mark.asyncio
async def test_empty_graph_without_id_is_invalid() -> None:
    result = await validate_graph({"nodes": {}, "connections": {}})
    assert result.codes() == ["MISSING_GRAPH_ID", "EMPTY_GRAPH"]
    assert result.errors[0].severity == "critical"
    assert result.valid is False


@pytest.mark.asyncio
async def test_malformed_payload_is_reported_not_raised() -> None:
    payload = {
        "id": "g",
        "nodes": {
            "start": {"id": "start", "type": "start", "position": {"x": 0, "y": 0}},
            "say": {
                "id": "say",
                "type": "output",
                "label": 7,
                "config": "oops",
                "position": {"x": 1, "y": 0},
            },
            "ghost": None,
        },
        "connections": {
            "c1": {
                "id": "c1",
                "sourceNodeId": "start",
                "targetNodeId": "say",
                "sourcePortId": 0,
                "targetPortId": 1,
                "type": 3,
            },
            "c2": "broken",
        },
    }
    result = await validate_graph(payload)
    codes = result.codes()
    assert "MISSING_ACTION" in codes
    assert "MISSING_NODE_ID" in codes
    assert "MISSING_CONNECTION_ID" in codes
    assert result.valid is False


@pytest.mark.asyncio
async def test_scenario_start_to_end() -> None:
    result = await validate_graph(make_chain([]))
    assert result.valid is True
    assert result.errors == []
    assert "UNREACHABLE_NODE" not in result.codes()


@pytest.mark.asyncio
async def test_scenario_two_node_cycle() -> None:
    graph = make_graph(
        [make_node("A", "custom"), make_node("B", "custom")],
        [make_connection("c1", "A", "B"), make_connection("c2", "B", "A")],
    )
    result = await validate_graph(graph)
    cycles = [e for e in result.errors if e.code == "CIRCULAR_DEPENDENCY"]
    assert len(cycles) == 1
    assert "A → B → A" in cycles[0].message
    assert result.valid is False


@pytest.mark.asyncio
async def test_scenario_too_many_isolated_nodes() -> None:
    graph = make_graph([make_node(f"n{i}", "custom") for i in range(1001)])
    result = await validate_graph(graph)
    codes = result.codes()
    assert codes.count("TOO_MANY_NODES") == 1
    assert codes.count("ISOLATED_NODE") == 1001
    assert result.valid is True


@pytest.mark.asyncio
async def test_scenario_condition_without_condition() -> None:
    graph = make_graph(
        [make_node("start", "start"), make_node("C", "condition")],
        [make_connection("c1", "start", "C")],
    )
    result = await validate_graph(graph)
    assert "MISSING_CONDITION" in [e.code for e in result.errors]
    assert result.valid is False


@pytest.mark.asyncio
async def test_self_loop_yields_exactly_one_self_connection() -> None:
    graph = make_chain(["x"])
    graph.connections["loop"] = make_connection("loop", "x", "x")
    result = await validate_graph(graph)
    codes = [e.code for e in result.errors]
    assert codes.count("SELF_CONNECTION") == 1
    assert "CIRCULAR_DEPENDENCY" not in codes


@pytest.mark.asyncio
async def test_dangling_target_does_not_stop_other_checks() -> None:
    graph = make_chain(["x"])
    graph.connections["bad"] = make_connection("bad", "x", "ghost")
    graph.nodes["orphan"] = make_node("orphan", "custom")
    result = await validate_graph(graph)
    codes = result.codes()
    assert "INVALID_TARGET_NODE" in codes
    assert "UNREACHABLE_NODE" in codes
    assert "ISOLATED_NODE" in codes
    assert result.valid is False


@pytest.mark.asyncio
async def test_isolated_node_also_unreachable() -> None:
    graph = make_chain([])
    graph.nodes["lonely"] = make_node("lonely", "custom")
    result = await validate_graph(graph)
    lonely = [c for c in result.codes() if c in {"ISOLATED_NODE", "UNREACHABLE_NODE"}]
    assert sorted(lonely) == ["ISOLATED_NODE", "UNREACHABLE_NODE"]


@pytest.mark.asyncio
async def test_condition_wire_reported_under_both_codes() -> None:
    graph = make_graph(
        [
            make_node("start", "start"),
            make_node("c", "condition", condition={"v": 1}),
            make_node("end", "end"),
        ],
        [make_connection("c1", "start", "c"), make_connection("c2", "c", "end")],
    )
    result = await validate_graph(graph)
    codes = [w.code for w in result.warnings]
    assert "CONDITION_CONNECTION_TYPE" in codes
    assert "TYPE_MISMATCH" in codes
    assert result.valid is True


class TestOptions:
    def _cyclic_graph(self) -> LogicGraph:
        return make_graph(
            [make_node("A", "custom"), make_node("B", "custom")],
            [make_connection("c1", "A", "B"), make_connection("c2", "B", "A")],
        )

    @pytest.mark.asyncio
    async def test_cycle_check_can_be_disabled(self) -> None:
        result = await validate_graph(
            self._cyclic_graph(), ValidationOptions(check_circular_dependencies=False)
        )
        assert result.valid is True

    @pytest.mark.asyncio
    async def test_options_accept_camel_case_mapping(self) -> None:
        result = await validate_graph(
            self._cyclic_graph(), {"checkCircularDependencies": False, "checkReachability": False}
        )
        assert result.valid is True
        assert "NO_EXIT_POINTS" not in result.codes()

    @pytest.mark.asyncio
    async def test_numeric_string_options_are_converted(self) -> None:
        graph = make_graph([make_node(f"n{i}", "custom") for i in range(5)])
        result = await validate_graph(graph, {"maxNodeCount": "2"})
        assert "TOO_MANY_NODES" in result.codes()

    @pytest.mark.asyncio
    async def test_mistyped_option_fails_before_validation(self) -> None:
        with pytest.raises(ValueError, match="maxNodeCount"):
            await validate_graph(self._cyclic_graph(), {"maxNodeCount": "lots"})

    @pytest.mark.asyncio
    async def test_performance_can_be_disabled(self) -> None:
        graph = make_graph([make_node(f"n{i}", "custom") for i in range(5)])
        result = await validate_graph(graph, {"maxNodeCount": 2, "checkPerformance": False})
        assert "TOO_MANY_NODES" not in result.codes()

    @pytest.mark.asyncio
    async def test_dead_code_can_be_disabled(self) -> None:
        graph = make_chain([])
        graph.nodes["lonely"] = make_node("lonely", "custom")
        result = await validate_graph(graph, ValidationOptions(check_dead_code=False))
        assert "UNREACHABLE_NODE" not in result.codes()

    @pytest.mark.asyncio
    async def test_type_check_can_be_disabled(self) -> None:
        graph = make_graph(
            [make_node("c", "condition", condition={"v": 1}), make_node("e", "end")],
            [make_connection("w", "c", "e")],
        )
        result = await validate_graph(graph, ValidationOptions(check_type_compatibility=False))
        codes = result.codes()
        assert "TYPE_MISMATCH" not in codes
        assert "CONDITION_CONNECTION_TYPE" in codes


class TestCustomValidators:
    @pytest.mark.asyncio
    async def test_results_are_merged(self) -> None:
        def no_timers(graph: LogicGraph) -> LogicValidationResult:
            result = LogicValidationResult()
            result.errors.append(
                ValidationError(code="NO_TIMERS", message="x", plain_message="No timers")
            )
            return result

        validator = LogicValidator([CustomValidator(name="no-timers", validate=no_timers)])
        result = await validator.validate_graph(make_chain([]))
        assert result.codes()[-1] == "NO_TIMERS"
        assert result.valid is False

    @pytest.mark.asyncio
    async def test_async_validators_and_none_results(self) -> None:
        async def note(graph: LogicGraph) -> LogicValidationResult:
            return LogicValidationResult(info=[ValidationInfo(code="NOTE", message="hi")])

        async def silent(graph: LogicGraph) -> None:
            return None

        validator = LogicValidator()
        validator.register_custom_validator(CustomValidator(name="note", validate=note))
        validator.register_custom_validator(CustomValidator(name="silent", validate=silent))
        result = await validator.validate_graph(make_chain([]))
        assert "NOTE" in result.codes()
        assert result.valid is True

    @pytest.mark.asyncio
    async def test_run_in_descending_priority(self) -> None:
        calls: list[str] = []

        def recorder(name: str):
            def run(graph: LogicGraph) -> None:
                calls.append(name)

            return run

        validator = LogicValidator()
        validator.register_custom_validator(CustomValidator("low", recorder("low"), priority=1))
        validator.register_custom_validator(CustomValidator("high", recorder("high"), priority=9))
        validator.register_custom_validator(CustomValidator("mid", recorder("mid"), priority=5))
        validator.register_custom_validator(CustomValidator("mid2", recorder("mid2"), priority=5))
        await validator.validate_graph(make_chain([]))
        assert calls == ["high", "mid", "mid2", "low"]

    @pytest.mark.asyncio
    async def test_failure_becomes_warning(self) -> None:
        def broken(graph: LogicGraph) -> None:
            raise RuntimeError("boom")

        def after(graph: LogicGraph) -> LogicValidationResult:
            return LogicValidationResult(info=[ValidationInfo(code="AFTER", message="ran")])

        validator = LogicValidator(
            [
                CustomValidator(name="broken", validate=broken, priority=2),
                CustomValidator(name="after", validate=after, priority=1),
            ]
        )
        result = await validator.validate_graph(make_chain([]))
        failure = next(w for w in result.warnings if w.code == "CUSTOM_VALIDATOR_ERROR")
        assert "broken" in failure.message
        assert "boom" in failure.message
        assert "AFTER" in result.codes()
        assert result.valid is True

    @pytest.mark.asyncio
    async def test_wrong_return_type_becomes_warning(self) -> None:
        validator = LogicValidator(
            [CustomValidator(name="odd", validate=lambda graph: {"errors": []})]
        )
        result = await validator.validate_graph(make_chain([]))
        assert "CUSTOM_VALIDATOR_ERROR" in result.codes()

    @pytest.mark.asyncio
    async def test_node_scope_runs_per_node(self) -> None:
        def label_required(node: LogicNode) -> LogicValidationResult | None:
            if node.label:
                return None
            return LogicValidationResult(
                warnings=[
                    ValidationWarning(
                        code="NO_LABEL",
                        message=f"{node.id} has no label",
                        plain_message="Give this block a name",
                        node_id=node.id,
                    )
                ]
            )

        validator = LogicValidator(
            [CustomValidator(name="labels", validate=label_required, scope="node")]
        )
        result = await validator.validate_graph(make_chain(["x"]))
        assert [w.node_id for w in result.warnings if w.code == "NO_LABEL"] == [
            "start",
            "x",
            "end",
        ]

    def test_registration_management(self) -> None:
        validator = LogicValidator()
        validator.register_custom_validator(CustomValidator("a", lambda g: None))
        validator.register_custom_validator(CustomValidator("b", lambda g: None))
        assert validator.get_statistics() == {"custom_validators": 2}
        assert validator.unregister_custom_validator("a") is True
        assert validator.unregister_custom_validator("a") is False
        assert [v.name for v in validator.custom_validators] == ["b"]

    def test_instances_are_isolated(self) -> None:
        first = LogicValidator([CustomValidator("a", lambda g: None)])
        second = LogicValidator()
        assert first.get_statistics() == {"custom_validators": 1}
        assert second.get_statistics() == {"custom_validators": 0}


class TestCancellation:
    @pytest.mark.asyncio
    async def test_cancelled_token_raises(self) -> None:
        token = CancellationToken()
        token.cancel()
        with pytest.raises(ValidationCancelledError, match="cancelled before structure"):
            await LogicValidator().validate_graph(make_chain([]), cancel_token=token)

    @pytest.mark.asyncio
    async def test_cancel_from_custom_validator_stops_later_ones(self) -> None:
        token = CancellationToken()
        calls: list[str] = []

        def cancel(graph: LogicGraph) -> None:
            calls.append("cancel")
            token.cancel()

        def later(graph: LogicGraph) -> None:
            calls.append("later")

        validator = LogicValidator(
            [CustomValidator("cancel", cancel, priority=2), CustomValidator("later", later)]
        )
        with pytest.raises(ValidationCancelledError):
            await validator.validate_graph(make_chain([]), cancel_token=token)
        assert calls == ["cancel"]

    @pytest.mark.asyncio
    async def test_uncancelled_token_is_harmless(self) -> None:
        result = await LogicValidator().validate_graph(
            make_chain([]), cancel_token=CancellationToken()
        )
        assert result.valid is True
