"""Result types produced by logic graph validation.

Every finding carries a machine-readable ``code``. Errors and warnings also
carry a ``plain_message`` written for authors who never see the code, which
the editor shows verbatim next to the offending node or connection.

Only errors affect validity; warnings, info notes and suggestions are
advisory.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Literal

ErrorSeverity = Literal["critical", "error"]
SuggestionType = Literal["optimization", "simplification", "best-practice"]


def _compact(entries: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in entries.items() if v is not None}


@dataclass
class Fix:
    """A proposed remedy attached to an error.

    Attributes:
        description: What the author should do.
        auto_fixable: Whether the editor may apply the fix without asking.
        action: Optional callback that applies the fix. Never serialized.
    """

    description: str
    auto_fixable: bool = False
    action: Callable[[], None] | None = field(default=None, compare=False, repr=False)

    def to_dict(self) -> dict[str, Any]:
        return {"description": self.description, "autoFixable": self.auto_fixable}


@dataclass
class ValidationError:
    """A defect that makes the graph invalid."""

    code: str
    message: str
    plain_message: str
    severity: ErrorSeverity = "error"
    node_id: str | None = None
    connection_id: str | None = None
    fix: Fix | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            {
                "code": self.code,
                "message": self.message,
                "plainMessage": self.plain_message,
                "nodeId": self.node_id,
                "connectionId": self.connection_id,
                "severity": self.severity,
                "fix": self.fix.to_dict() if self.fix else None,
            }
        )


@dataclass
class ValidationWarning:
    """A likely mistake that does not block execution."""

    code: str
    message: str
    plain_message: str
    node_id: str | None = None
    connection_id: str | None = None
    suggestion: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            {
                "code": self.code,
                "message": self.message,
                "plainMessage": self.plain_message,
                "nodeId": self.node_id,
                "connectionId": self.connection_id,
                "suggestion": self.suggestion,
            }
        )


@dataclass
class ValidationInfo:
    """A neutral note for downstream tooling."""

    code: str
    message: str
    node_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact({"code": self.code, "message": self.message, "nodeId": self.node_id})


@dataclass
class Suggestion:
    """An optional improvement to the graph."""

    type: SuggestionType
    message: str
    node_id: str | None = None
    action: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            {
                "type": self.type,
                "message": self.message,
                "nodeId": self.node_id,
                "action": self.action,
            }
        )


@dataclass
class LogicValidationResult:
    """Aggregated findings of one validation run.

    Attributes:
        valid: True iff ``errors`` is empty (kept in sync by ``finalize``).
        errors: Blocking defects.
        warnings: Advisory findings with author-facing text.
        info: Neutral notes.
        suggestions: Optional improvements.
    """

    valid: bool = True
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[ValidationWarning] = field(default_factory=list)
    info: list[ValidationInfo] = field(default_factory=list)
    suggestions: list[Suggestion] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)

    @property
    def summary(self) -> str:
        """Human-readable summary of finding counts."""
        parts: list[str] = []
        if self.errors:
            parts.append(f"{len(self.errors)} errors")
        if self.warnings:
            parts.append(f"{len(self.warnings)} warnings")
        if self.info:
            parts.append(f"{len(self.info)} info")
        if self.suggestions:
            parts.append(f"{len(self.suggestions)} suggestions")
        return ", ".join(parts) or "no findings"

    def codes(self) -> list[str]:
        """All error, warning and info codes in report order."""
        return [
            *(e.code for e in self.errors),
            *(w.code for w in self.warnings),
            *(i.code for i in self.info),
        ]

    def merge(self, other: LogicValidationResult) -> None:
        """Append another (partial) result's findings to this one."""
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        self.info.extend(other.info)
        self.suggestions.extend(other.suggestions)

    def finalize(self) -> LogicValidationResult:
        """Recompute ``valid`` from the error list and return self."""
        self.valid = not self.errors
        return self

    def to_dict(self) -> dict[str, Any]:
        """Render the wire shape consumed by the editor (camelCase keys)."""
        return {
            "valid": self.valid,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
            "info": [i.to_dict() for i in self.info],
            "suggestions": [s.to_dict() for s in self.suggestions],
        }
