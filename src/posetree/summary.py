"""Read-only reporting over a trained regression tree."""

from __future__ import annotations

import polars as pl
from pydantic import BaseModel, Field, model_validator

from posetree.induction import RegressionTree
from posetree.tree_storage import NodeStore

_LEAF_TABLE_SCHEMA: dict[str, type[pl.DataType]] = {
    "leaf_index": pl.Int64,
    "node_index": pl.Int64,
    "depth": pl.Int64,
    "count": pl.Int64,
    "mean_pitch": pl.Float64,
    "mean_yaw": pl.Float64,
    "var_pitch": pl.Float64,
    "var_yaw": pl.Float64,
    "cov_pitch_yaw": pl.Float64,
}


class TreeSummary(BaseModel):
    """Structural overview of a trained tree.

    Attributes:
        sample_count (int): Number of patches the tree was grown from.
        max_depth (int): Configured maximum depth.
        depth (int): Depth of the deepest resolved node.
        internal_count (int): Number of split nodes.
        leaf_count (int): Number of leaves.
        empty_leaf_count (int): Number of leaves no training patch reached.

    Examples:
        >>> TreeSummary(
        ...     sample_count=100,
        ...     max_depth=3,
        ...     depth=2,
        ...     internal_count=2,
        ...     leaf_count=3,
        ...     empty_leaf_count=0,
        ... ).leaf_count
        3
    """

    sample_count: int = Field(ge=1, description="Number of patches the tree was grown from.")
    max_depth: int = Field(ge=0, description="Configured maximum depth.")
    depth: int = Field(ge=0, description="Depth of the deepest resolved node.")
    internal_count: int = Field(ge=0, description="Number of split nodes.")
    leaf_count: int = Field(ge=1, description="Number of leaves.")
    empty_leaf_count: int = Field(ge=0, description="Number of leaves that no training patch reached.")

    @model_validator(mode="after")
    def _validate_depth_within_limit(self) -> TreeSummary:
        """Validate that the tree is no deeper than its configured limit.

        Returns:
            TreeSummary: The validated model instance.

        Raises:
            ValueError: If `depth` exceeds `max_depth`.
        """
        if self.depth > self.max_depth:
            raise ValueError(f"depth ({self.depth}) must not exceed max_depth ({self.max_depth})")
        return self

    @model_validator(mode="after")
    def _validate_full_binary_tree(self) -> TreeSummary:
        """Validate that every split node has exactly two resolved children.

        Returns:
            TreeSummary: The validated model instance.

        Raises:
            ValueError: If `leaf_count` is not `internal_count + 1`.
        """
        if self.leaf_count != self.internal_count + 1:
            raise ValueError(
                f"leaf_count ({self.leaf_count}) must equal internal_count + 1 ({self.internal_count + 1})"
            )
        return self


def summarize_tree(tree: RegressionTree, sample_count: int) -> TreeSummary:
    """Build a `TreeSummary` for `tree`.

    Args:
        tree (RegressionTree): A trained tree.
        sample_count (int): Number of patches the tree was grown from.

    Returns:
        TreeSummary: The structural overview.
    """
    return TreeSummary(
        sample_count=sample_count,
        max_depth=tree.config.max_depth,
        depth=tree.depth,
        internal_count=sum(1 for _ in tree.internal_nodes()),
        leaf_count=tree.num_leaves,
        empty_leaf_count=sum(1 for leaf in tree.leaves if leaf.is_empty),
    )


def leaf_table(tree: RegressionTree) -> pl.DataFrame:
    """Tabulate the leaf statistics of `tree`, one row per leaf.

    Empty leaves have null statistics.

    Args:
        tree (RegressionTree): A trained tree.

    Returns:
        pl.DataFrame: Columns `leaf_index`, `node_index`, `depth`, `count`,
            `mean_pitch`, `mean_yaw`, `var_pitch`, `var_yaw` and
            `cov_pitch_yaw`, sorted by `leaf_index`.
    """
    rows = []
    for node_index, ref in tree.leaf_nodes():
        leaf = tree.store.leaf(ref.leaf_index)
        mean = leaf.mean or (None, None)
        covariance = leaf.covariance or ((None, None), (None, None))
        rows.append({
            "leaf_index": ref.leaf_index,
            "node_index": node_index,
            "depth": NodeStore.depth_of(node_index),
            "count": leaf.count,
            "mean_pitch": mean[0],
            "mean_yaw": mean[1],
            "var_pitch": covariance[0][0],
            "var_yaw": covariance[1][1],
            "cov_pitch_yaw": covariance[0][1],
        })
    return pl.DataFrame(rows, schema=_LEAF_TABLE_SCHEMA).sort("leaf_index")
