"""Tests for validation configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from storylogic.config import (
    DEFAULT_MAX_DEPTH,
    DEFAULT_MAX_NODE_COUNT,
    ValidationConfigError,
    ValidationOptions,
    load_validation_config,
    write_default_config,
)

if TYPE_CHECKING:
    from pathlib import Path


class TestValidationOptions:
    """Tests for ValidationOptions class."""

    def test_defaults(self) -> None:
        options = ValidationOptions()

        assert options.check_circular_dependencies is True
        assert options.check_performance is True
        assert options.max_node_count == DEFAULT_MAX_NODE_COUNT == 1000
        assert options.max_connection_count == 2000
        assert options.max_depth == DEFAULT_MAX_DEPTH == 50
        assert options.max_branches == 10

    def test_from_dict_camel_case(self) -> None:
        """Editor payloads use camelCase keys."""
        options = ValidationOptions.from_dict(
            {"checkDeadCode": False, "maxNodeCount": 50, "maxBranches": 3}
        )

        assert options.check_dead_code is False
        assert options.max_node_count == 50
        assert options.max_branches == 3
        assert options.check_reachability is True

    def test_from_dict_snake_case(self) -> None:
        options = ValidationOptions.from_dict({"check_type_compatibility": False})

        assert options.check_type_compatibility is False

    def test_from_dict_ignores_unknown_keys_and_none(self) -> None:
        options = ValidationOptions.from_dict({"theme": "dark", "maxDepth": None})

        assert options == ValidationOptions()

    def test_from_dict_converts_strings(self) -> None:
        options = ValidationOptions.from_dict({"maxNodeCount": "1000", "checkDeadCode": "no"})

        assert options.max_node_count == 1000
        assert options.check_dead_code is False

    @pytest.mark.parametrize(
        ("key", "value"),
        [
            ("maxNodeCount", "lots"),
            ("max_depth", True),
            ("maxBranches", 2.5),
            ("maxDepth", -1),
            ("checkPerformance", "maybe"),
            ("check_dead_code", 1),
        ],
    )
    def test_from_dict_rejects_mistyped_values(self, key: str, value: object) -> None:
        with pytest.raises(ValueError, match=key):
            ValidationOptions.from_dict({key: value})

    def test_merged_skips_none(self) -> None:
        base = ValidationOptions(max_depth=5)
        merged = base.merged(max_depth=None, check_performance=False)

        assert merged.max_depth == 5
        assert merged.check_performance is False
        assert base.check_performance is True


class TestLoadValidationConfig:
    """Tests for load_validation_config."""

    def test_top_level_keys(self, tmp_path: Path) -> None:
        path = tmp_path / "storylogic.yaml"
        path.write_text("checkCircularDependencies: false\nmax_depth: 12\n")

        options = load_validation_config(path)

        assert options.check_circular_dependencies is False
        assert options.max_depth == 12

    def test_validation_section(self, tmp_path: Path) -> None:
        path = tmp_path / "project.yaml"
        path.write_text("name: demo\nvalidation:\n  maxNodeCount: 200\n")

        options = load_validation_config(path)

        assert options.max_node_count == 200

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ValidationConfigError, match="File not found"):
            load_validation_config(tmp_path / "nope.yaml")

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "storylogic.yaml"
        path.write_text("")

        with pytest.raises(ValidationConfigError, match="Empty file"):
            load_validation_config(path)

    def test_non_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "storylogic.yaml"
        path.write_text("- one\n- two\n")

        with pytest.raises(ValidationConfigError, match="mapping"):
            load_validation_config(path)

    def test_malformed_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "storylogic.yaml"
        path.write_text("validation: [unclosed\n")

        with pytest.raises(ValidationConfigError):
            load_validation_config(path)

    def test_mistyped_value_is_config_error(self, tmp_path: Path) -> None:
        path = tmp_path / "storylogic.yaml"
        path.write_text("max_node_count: lots\n")

        with pytest.raises(ValidationConfigError, match="max_node_count must be an integer"):
            load_validation_config(path)

    def test_env_overrides_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "storylogic.yaml"
        path.write_text("maxNodeCount: 200\nmaxDepth: 9\n")
        monkeypatch.setenv("STORYLOGIC_MAX_NODE_COUNT", "75")

        options = load_validation_config(path)

        assert options.max_node_count == 75
        assert options.max_depth == 9

    def test_invalid_env_value(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "storylogic.yaml"
        path.write_text("maxDepth: 9\n")
        monkeypatch.setenv("STORYLOGIC_MAX_DEPTH", "deep")

        with pytest.raises(ValidationConfigError, match="STORYLOGIC_MAX_DEPTH"):
            load_validation_config(path)


def test_write_default_config_round_trips(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "storylogic.yaml"

    written = write_default_config(path)

    assert path.exists()
    assert "validation:" in path.read_text()
    assert load_validation_config(path) == written == ValidationOptions()
