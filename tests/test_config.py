"""Tests for TrainingConfig defaults, validation and environment overrides."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError
from pytest_check import check

from posetree.config import MAX_SUPPORTED_DEPTH, TrainingConfig


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Run each test without POSETREE_* variables and away from any .env file.

    Args:
        monkeypatch (pytest.MonkeyPatch): Pytest monkeypatch fixture.
        tmp_path (Path): Temporary working directory.
    """
    for name in ("MIN_SAMPLES", "MAX_DEPTH", "NUM_OUTER_ITERATIONS", "NUM_THRESHOLD_TRIALS"):
        monkeypatch.delenv(f"POSETREE_{name}", raising=False)
    monkeypatch.chdir(tmp_path)


class TestTrainingConfig:
    """Tests for `TrainingConfig`."""

    def test_defaults(self) -> None:
        """Defaults should match the documented values."""
        # Act
        config = TrainingConfig()

        # Assert
        with check:
            assert config.min_samples == 20
        with check:
            assert config.max_depth == 15
        with check:
            assert config.num_outer_iterations is None
        with check:
            assert config.num_threshold_trials == 10

    @pytest.mark.parametrize(
        "overrides",
        [
            {"min_samples": -1},
            {"max_depth": -1},
            {"max_depth": MAX_SUPPORTED_DEPTH + 1},
            {"num_outer_iterations": 0},
            {"num_threshold_trials": 0},
        ],
        ids=["negative-min-samples", "negative-depth", "too-deep", "zero-iterations", "zero-thresholds"],
    )
    def test_invalid_values_rejected(self, overrides: dict[str, int]) -> None:
        """Out-of-range hyperparameters should fail validation."""
        with pytest.raises(ValidationError):
            TrainingConfig(**overrides)

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """POSETREE_* variables should populate the configuration."""
        # Arrange
        monkeypatch.setenv("POSETREE_MAX_DEPTH", "7")
        monkeypatch.setenv("POSETREE_NUM_OUTER_ITERATIONS", "300")

        # Act
        config = TrainingConfig()

        # Assert
        with check:
            assert config.max_depth == 7
        with check:
            assert config.num_outer_iterations == 300

    def test_explicit_arguments_beat_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Constructor arguments take precedence over environment variables."""
        # Arrange
        monkeypatch.setenv("POSETREE_MIN_SAMPLES", "99")

        # Act / Assert
        assert TrainingConfig(min_samples=3).min_samples == 3

    def test_config_is_frozen(self) -> None:
        """A configuration cannot be changed after construction."""
        # Arrange
        config = TrainingConfig()

        # Act / Assert
        with pytest.raises(ValidationError):
            config.max_depth = 3  # type: ignore[misc]

    @pytest.mark.parametrize(
        ("num_outer_iterations", "root_sample_count", "expected"),
        [(None, 250, 250), (None, 0, 1), (12, 250, 12)],
    )
    def test_resolve_outer_iterations(
        self,
        num_outer_iterations: int | None,
        root_sample_count: int,
        expected: int,
    ) -> None:
        """Unset iterations fall back to the root sample count."""
        # Arrange
        config = TrainingConfig(num_outer_iterations=num_outer_iterations)

        # Act / Assert
        assert config.resolve_outer_iterations(root_sample_count) == expected
