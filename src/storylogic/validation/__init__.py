"""Static validation for logic graphs.

This module provides:
- LogicValidator: runs every check and returns a LogicValidationResult
- The individual node, connection and whole-graph checks
- Result types carrying machine codes and author-facing messages
"""

from storylogic.validation.connection_checks import validate_connection
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
from storylogic.validation.types import (
    Fix,
    LogicValidationResult,
    Suggestion,
    ValidationError,
    ValidationInfo,
    ValidationWarning,
)
from storylogic.validation.validator import (
    CancellationToken,
    CustomValidator,
    LogicValidator,
    validate_graph,
)

__all__ = [
    "CancellationToken",
    "CustomValidator",
    "Fix",
    "LogicValidationResult",
    "LogicValidator",
    "Suggestion",
    "ValidationError",
    "ValidationInfo",
    "ValidationWarning",
    "check_graph_structure",
    "check_performance",
    "check_reachability",
    "check_type_compatibility",
    "detect_circular_dependencies",
    "detect_dead_code",
    "generate_suggestions",
    "validate_connection",
    "validate_graph",
    "validate_node",
]
