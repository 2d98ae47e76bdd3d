"""Validation configuration loading."""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path  # noqa: TC003 - used at runtime
from typing import Any

from ruamel.yaml import YAML

# Default thresholds
DEFAULT_MAX_NODE_COUNT = 1000
DEFAULT_MAX_CONNECTION_COUNT = 2000
DEFAULT_MAX_DEPTH = 50
DEFAULT_MAX_BRANCHES = 10

# Environment overrides, applied on top of the config file
ENV_OVERRIDES: dict[str, str] = {
    "STORYLOGIC_MAX_NODE_COUNT": "max_node_count",
    "STORYLOGIC_MAX_CONNECTION_COUNT": "max_connection_count",
    "STORYLOGIC_MAX_DEPTH": "max_depth",
}

# Editor (camelCase) spelling of each option
_CAMEL_KEYS: dict[str, str] = {
    "checkCircularDependencies": "check_circular_dependencies",
    "checkDeadCode": "check_dead_code",
    "checkReachability": "check_reachability",
    "checkTypeCompatibility": "check_type_compatibility",
    "checkPerformance": "check_performance",
    "maxNodeCount": "max_node_count",
    "maxConnectionCount": "max_connection_count",
    "maxDepth": "max_depth",
    "maxBranches": "max_branches",
}


_BOOL_WORDS: dict[str, bool] = {
    "true": True,
    "yes": True,
    "on": True,
    "false": False,
    "no": False,
    "off": False,
}


def _coerce_option(name: str, default: Any, value: Any) -> Any:
    """Check *value* against the type of the option's default.

    Strings are read as integers or true/false words. Booleans are never
    accepted as integers.

    Raises:
        ValueError: If the value cannot be read as the option's type.
    """
    if isinstance(default, bool):
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in _BOOL_WORDS:
            return _BOOL_WORDS[value.strip().lower()]
        raise ValueError(f"{name} must be true or false, got {value!r}")

    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            raise ValueError(f"{name} must be an integer, got {value!r}") from None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {value}")
    return value


@dataclass(frozen=True)
class ValidationOptions:
    """Which validation passes run and the thresholds they use.

    Attributes:
        check_circular_dependencies: Report cycles in the graph.
        check_dead_code: Report nodes unreachable from a start node.
        check_reachability: Note graphs without an end node.
        check_type_compatibility: Apply the condition wire rule.
        check_performance: Apply the size, fan-out and depth limits.
        max_node_count: Node count above which TOO_MANY_NODES is raised.
        max_connection_count: Connection count above which
            TOO_MANY_CONNECTIONS is raised.
        max_depth: Longest path from a start node (in nodes) above which
            MAX_DEPTH_EXCEEDED is raised.
        max_branches: Outgoing connections per node above which
            TOO_MANY_BRANCHES is raised.
    """

    check_circular_dependencies: bool = True
    check_dead_code: bool = True
    check_reachability: bool = True
    check_type_compatibility: bool = True
    check_performance: bool = True
    max_node_count: int = DEFAULT_MAX_NODE_COUNT
    max_connection_count: int = DEFAULT_MAX_CONNECTION_COUNT
    max_depth: int = DEFAULT_MAX_DEPTH
    max_branches: int = DEFAULT_MAX_BRANCHES

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ValidationOptions:
        """Create options from a dictionary.

        Accepts snake_case keys or the editor's camelCase keys. Unknown keys
        are ignored so editor payloads can be passed through unchanged.
        Values are checked against each option's type; numeric strings and
        true/false words are converted.

        Args:
            data: Partial options; missing keys keep their defaults.

        Returns:
            ValidationOptions instance.

        Raises:
            ValueError: If a value has the wrong type or a negative threshold.
        """
        defaults = {f.name: f.default for f in fields(cls)}
        values: dict[str, Any] = {}
        for key, value in data.items():
            name = _CAMEL_KEYS.get(key, key)
            if name in defaults and value is not None:
                values[name] = _coerce_option(key, defaults[name], value)
        return cls(**values)

    def merged(self, **overrides: Any) -> ValidationOptions:
        """Return a copy with the non-None overrides applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class ValidationConfigError(Exception):
    """Raised when validation configuration cannot be loaded."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load validation config at {path}: {reason}")


def _apply_env_overrides(data: dict[str, Any], path: Path) -> dict[str, Any]:
    merged = dict(data)
    for env_var, option in ENV_OVERRIDES.items():
        raw = os.getenv(env_var)
        if not raw:
            continue
        try:
            merged[option] = int(raw)
        except ValueError as e:
            raise ValidationConfigError(path, f"{env_var} must be an integer, got {raw!r}") from e
    return merged


def load_validation_config(config_path: Path) -> ValidationOptions:
    """Load validation options from a YAML file.

    The options may sit at the top level of the file or under a
    ``validation:`` key (so they can share a project file). Environment
    variables listed in ``ENV_OVERRIDES`` take precedence over the file.

    Args:
        config_path: Path to the YAML file.

    Returns:
        ValidationOptions instance.

    Raises:
        ValidationConfigError: If the file is missing, empty or malformed.
    """
    if not config_path.exists():
        raise ValidationConfigError(config_path, "File not found")

    yaml = YAML()
    try:
        with config_path.open("r", encoding="utf-8") as f:
            data = yaml.load(f)

        if data is None:
            raise ValidationConfigError(config_path, "Empty file")
        if not isinstance(data, dict):
            raise ValidationConfigError(config_path, "Expected a mapping at the top level")

        section = data.get("validation", data)
        if not isinstance(section, dict):
            raise ValidationConfigError(config_path, "'validation' must be a mapping")

        return ValidationOptions.from_dict(_apply_env_overrides(dict(section), config_path))
    except Exception as e:
        if isinstance(e, ValidationConfigError):
            raise
        raise ValidationConfigError(config_path, str(e)) from e


def write_default_config(config_path: Path) -> ValidationOptions:
    """Write the default options to *config_path* under a ``validation:`` key.

    Returns:
        The options that were written.
    """
    options = ValidationOptions()
    yaml = YAML()
    yaml.default_flow_style = False
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with config_path.open("w", encoding="utf-8") as f:
        yaml.dump({"validation": options.to_dict()}, f)
    return options
