"""Training configuration for regression tree induction."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

MAX_SUPPORTED_DEPTH: int = 24  # Storage grows as 2^(depth+1); beyond this the arena no longer fits in memory.


class TrainingConfig(BaseSettings):
    """Hyperparameters for growing one regression tree.

    Values can be passed directly or read from ``POSETREE_*`` environment
    variables (and an optional ``.env`` file). Instances are frozen.

    Attributes:
        min_samples (int): A child partition with at most this many patches
            becomes a leaf without further splitting.
        max_depth (int): Maximum depth of the tree; the root is depth 0.
        num_outer_iterations (int | None): Candidate tests drawn per node.
            `None` uses the size of the root training set.
        num_threshold_trials (int): Thresholds tried per candidate test.

    Examples:
        >>> config = TrainingConfig(max_depth=4, min_samples=5)
        >>> config.num_threshold_trials
        10
        >>> config.resolve_outer_iterations(250)
        250
    """

    model_config = SettingsConfigDict(
        env_prefix="POSETREE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    min_samples: int = Field(
        default=20,
        ge=0,
        description="Child partitions with at most this many patches are turned into leaves.",
    )
    max_depth: int = Field(
        default=15,
        ge=0,
        le=MAX_SUPPORTED_DEPTH,
        description="Maximum tree depth; the root is at depth 0.",
    )
    num_outer_iterations: int | None = Field(
        default=None,
        ge=1,
        description="Candidate tests drawn per node. None uses the root training set size.",
    )
    num_threshold_trials: int = Field(
        default=10,
        ge=1,
        description="Random thresholds tried for each candidate test.",
    )

    def resolve_outer_iterations(self, root_sample_count: int) -> int:
        """Return the number of candidate tests to draw per node.

        Args:
            root_sample_count (int): Number of patches in the root training set.

        Returns:
            int: `num_outer_iterations` if set, otherwise `root_sample_count`
                (at least 1).
        """
        if self.num_outer_iterations is not None:
            return self.num_outer_iterations
        return max(1, root_sample_count)
