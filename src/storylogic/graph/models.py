"""Logic graph models.

These models describe the node-and-wire snapshot the editor hands to the
validator. They are deliberately lenient: malformed editor data (missing ids,
unknown node types, broken positions, non-object entries) must survive
parsing so the validator can report it instead of rejecting the whole graph.

Field names are snake_case; the editor's camelCase keys (``sourceNodeId``,
``targetPortId``, ...) are accepted as aliases and produced by ``to_dict``.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class NodeType(StrEnum):
    """Node type tags known to this validator."""

    START = "start"
    END = "end"
    COMMENT = "comment"
    CONDITION = "condition"
    VARIABLE_CHECK = "variable-check"
    VARIABLE_SET = "variable-set"
    MATH_OPERATION = "math-operation"
    OUTPUT = "output"
    LOOP = "loop"
    AND_GATE = "and-gate"
    OR_GATE = "or-gate"
    RANDOM = "random"
    TIMER = "timer"
    INPUT = "input"
    SWITCH = "switch"
    CUSTOM = "custom"


class NodeCategory(StrEnum):
    """Validation families that node types are grouped into."""

    TERMINAL = "terminal"
    COMMENT = "comment"
    CONDITION = "condition"
    ACTION = "action"
    SEQUENCE = "sequence"
    PARALLEL = "parallel"
    VARIABLE = "variable"
    EVENT = "event"
    CUSTOM = "custom"


NODE_CATEGORIES: dict[NodeType, NodeCategory] = {
    NodeType.START: NodeCategory.TERMINAL,
    NodeType.END: NodeCategory.TERMINAL,
    NodeType.COMMENT: NodeCategory.COMMENT,
    NodeType.CONDITION: NodeCategory.CONDITION,
    NodeType.VARIABLE_CHECK: NodeCategory.CONDITION,
    NodeType.VARIABLE_SET: NodeCategory.ACTION,
    NodeType.MATH_OPERATION: NodeCategory.ACTION,
    NodeType.OUTPUT: NodeCategory.ACTION,
    NodeType.LOOP: NodeCategory.SEQUENCE,
    NodeType.AND_GATE: NodeCategory.PARALLEL,
    NodeType.OR_GATE: NodeCategory.PARALLEL,
    NodeType.RANDOM: NodeCategory.VARIABLE,
    NodeType.TIMER: NodeCategory.VARIABLE,
    NodeType.INPUT: NodeCategory.VARIABLE,
    NodeType.SWITCH: NodeCategory.EVENT,
    NodeType.CUSTOM: NodeCategory.CUSTOM,
}

# Node types whose outgoing wires carry control flow only
ACTION_TYPES: frozenset[str] = frozenset({NodeType.OUTPUT, NodeType.VARIABLE_SET})

# Wire types accepted out of a condition node
CONDITION_WIRE_TYPES: frozenset[str] = frozenset({"boolean", "condition"})


def category_for(type_tag: str) -> NodeCategory | None:
    """Return the category for a type tag, or None if the tag is unrecognised."""
    try:
        return NODE_CATEGORIES[NodeType(type_tag)]
    except ValueError:
        return None


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def _scalar_text(value: Any) -> str | None:
    """Render a scalar as text; containers and None become None."""
    if value is None or isinstance(value, dict | list):
        return None
    return str(value)


def _entry_mapping(value: Any) -> dict[str, Any]:
    """Normalise a node or connection collection to ``{key: entry}``.

    Editors occasionally export arrays instead of id-keyed objects; those are
    keyed by each entry's id (or position). Entries that are not objects are
    replaced by empty ones so their missing id is reported.
    """
    if isinstance(value, list):
        value = {
            str(entry.get("id") or i) if isinstance(entry, dict) else str(i): entry
            for i, entry in enumerate(value)
        }
    if not isinstance(value, dict):
        return {}
    return {
        str(key): entry if isinstance(entry, BaseModel | dict) else {}
        for key, entry in value.items()
    }


class Position(BaseModel):
    """Canvas coordinates of a node (editor metadata only)."""

    x: float
    y: float


class LogicNode(BaseModel):
    """A typed unit of logic placed on the graph."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = ""
    type: str = ""
    label: str | None = None
    position: Position | None = None
    config: dict[str, Any] = Field(default_factory=dict)
    condition: Any = None

    @field_validator("id", "type", mode="before")
    @classmethod
    def coerce_tag(cls, v: Any) -> str:
        """Treat missing tags as empty strings so the validator can flag them."""
        if v is None:
            return ""
        return str(v)

    @field_validator("position", mode="before")
    @classmethod
    def drop_malformed_position(cls, v: Any) -> Any:
        """Normalise anything that is not ``{x: number, y: number}`` to None."""
        if isinstance(v, Position):
            return v
        if isinstance(v, dict) and _is_number(v.get("x")) and _is_number(v.get("y")):
            return {"x": v["x"], "y": v["y"]}
        return None

    @field_validator("label", mode="before")
    @classmethod
    def coerce_label(cls, v: Any) -> str | None:
        return _scalar_text(v)

    @field_validator("config", mode="before")
    @classmethod
    def default_config(cls, v: Any) -> Any:
        """Anything but a mapping counts as no configuration."""
        return v if isinstance(v, dict) else {}

    @property
    def display_name(self) -> str:
        """Label used in diagnostics, falling back to the node id."""
        return self.label or self.id


class LogicConnection(BaseModel):
    """A directed, typed edge between two node ports."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = ""
    source_node_id: str = Field(default="", alias="sourceNodeId")
    target_node_id: str = Field(default="", alias="targetNodeId")
    source_port_id: str | None = Field(default=None, alias="sourcePortId")
    target_port_id: str | None = Field(default=None, alias="targetPortId")
    type: str | None = None

    @field_validator("id", "source_node_id", "target_node_id", mode="before")
    @classmethod
    def coerce_ref(cls, v: Any) -> str:
        if v is None:
            return ""
        return str(v)

    @field_validator("source_port_id", "target_port_id", "type", mode="before")
    @classmethod
    def coerce_optional_text(cls, v: Any) -> str | None:
        return _scalar_text(v)

    @property
    def is_self_loop(self) -> bool:
        return bool(self.source_node_id) and self.source_node_id == self.target_node_id

    def edge_key(self) -> tuple[str, str, str | None, str | None]:
        """Identity used for duplicate-edge detection."""
        return (
            self.source_node_id,
            self.target_node_id,
            self.source_port_id,
            self.target_port_id,
        )


class LogicGraph(BaseModel):
    """Immutable snapshot of a logic graph as supplied by the editor."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = ""
    name: str | None = None
    nodes: dict[str, LogicNode] = Field(default_factory=dict)
    connections: dict[str, LogicConnection] = Field(default_factory=dict)

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        if v is None:
            return ""
        return str(v)

    @field_validator("name", mode="before")
    @classmethod
    def coerce_name(cls, v: Any) -> str | None:
        return _scalar_text(v)

    @field_validator("nodes", "connections", mode="before")
    @classmethod
    def default_mapping(cls, v: Any) -> dict[str, Any]:
        """A brand-new graph may omit its collections entirely."""
        return _entry_mapping(v)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LogicGraph:
        """Parse an editor graph payload (camelCase or snake_case keys)."""
        return cls.model_validate(data)

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the editor's camelCase keys."""
        return self.model_dump(by_alias=True, exclude_none=True)

    def nodes_of_type(self, *types: str) -> list[LogicNode]:
        """Return nodes whose type tag is one of *types*, in mapping order."""
        wanted = set(types)
        return [node for node in self.nodes.values() if node.type in wanted]
