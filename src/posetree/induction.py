"""Recursive induction of a pose regression tree."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Literal

import numpy as np
from loguru import logger

from posetree.binary_test import BinaryTest
from posetree.config import TrainingConfig
from posetree.information_gain import target_covariance
from posetree.logging import GROWTH_LEVEL
from posetree.patches import TrainingSet, target_matrix, validate_training_set
from posetree.random_source import NumpyRandomSource, RandomSource
from posetree.split_search import search_split
from posetree.tree_storage import InternalNode, LeafNode, LeafRef, NodeStore

type LeafReason = Literal["max_depth", "no_split", "min_samples"]

# ---------------------------------------------------------------------------
# Public interface -- Trained tree
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RegressionTree:
    """A trained pose regression tree.

    Attributes:
        store (NodeStore): Node arena and leaf records.
        config (TrainingConfig): Configuration the tree was grown with.
    """

    store: NodeStore
    config: TrainingConfig

    @property
    def num_leaves(self) -> int:
        """int: Number of leaves in the tree."""
        return self.store.num_leaves

    @property
    def leaves(self) -> tuple[LeafNode, ...]:
        """tuple[LeafNode, ...]: Leaf records in creation order."""
        return self.store.leaves

    @property
    def depth(self) -> int:
        """int: Depth of the deepest resolved node."""
        return max(NodeStore.depth_of(index) for index, _ in self.store.iter_resolved())

    def internal_nodes(self) -> Iterator[tuple[int, InternalNode]]:
        """Yield ``(index, node)`` for every split node.

        Yields:
            tuple[int, InternalNode]: Split nodes in slot order.
        """
        for index, slot in self.store.iter_resolved():
            if isinstance(slot, InternalNode):
                yield index, slot

    def leaf_nodes(self) -> Iterator[tuple[int, LeafRef]]:
        """Yield ``(index, ref)`` for every leaf slot.

        Yields:
            tuple[int, LeafRef]: Leaf slots in slot order.
        """
        for index, slot in self.store.iter_resolved():
            if isinstance(slot, LeafRef):
                yield index, slot

    def leaf_for_node(self, index: int) -> LeafNode | None:
        """Return the leaf stored at slot `index`, or `None` if it is not a leaf.

        Args:
            index (int): Slot index.

        Returns:
            LeafNode | None: The leaf record.
        """
        slot = self.store.node(index)
        if isinstance(slot, LeafRef):
            return self.store.leaf(slot.leaf_index)
        return None


# ---------------------------------------------------------------------------
# Public interface -- Leaf materialization
# ---------------------------------------------------------------------------


def make_leaf_node(working_set: TrainingSet) -> LeafNode:
    """Summarize the pose labels of the patches that reached a leaf.

    Args:
        working_set (TrainingSet): Patches at the leaf; may be empty.

    Returns:
        LeafNode: Count, mean and population covariance of ``(pitch, yaw)``.
            An empty set gives a leaf with count 0 and no statistics.
    """
    if len(working_set) == 0:
        return LeafNode(count=0)

    mean = np.mean(target_matrix(working_set), axis=0)
    covariance = target_covariance(working_set)
    cross = float(covariance[0, 1])
    return LeafNode(
        count=len(working_set),
        mean=(float(mean[0]), float(mean[1])),
        covariance=((float(covariance[0, 0]), cross), (cross, float(covariance[1, 1]))),
    )


# ---------------------------------------------------------------------------
# Public interface -- Induction
# ---------------------------------------------------------------------------


def grow_tree(
    training_set: TrainingSet,
    config: TrainingConfig | None = None,
    rng: RandomSource | None = None,
) -> RegressionTree:
    """Grow a regression tree from labeled patches.

    Args:
        training_set (TrainingSet): Non-empty patches of identical size.
        config (TrainingConfig | None): Training hyperparameters. Defaults to
            `TrainingConfig()`, which also reads ``POSETREE_*`` variables.
        rng (RandomSource | None): Random source for tests and thresholds.
            When `None` a source seeded from the clock is created. A source
            must not be shared with a concurrent training run.

    Returns:
        RegressionTree: The trained tree.

    Raises:
        EmptyTrainingSetError: If `training_set` is empty.
        PatchShapeMismatchError: If patches differ in size.
    """
    config = config if config is not None else TrainingConfig()
    width, height = validate_training_set(training_set)
    rng = rng if rng is not None else NumpyRandomSource.from_time()

    logger.info(
        "Tree induction started",
        samples=len(training_set),
        patch_size=(width, height),
        max_depth=config.max_depth,
        min_samples=config.min_samples,
    )

    inducer = _TreeInducer(
        store=NodeStore(config.max_depth),
        config=config,
        rng=rng,
        num_outer_iterations=config.resolve_outer_iterations(len(training_set)),
    )
    inducer.grow(training_set, node_index=0, depth=0)
    tree = RegressionTree(store=inducer.store, config=config)

    logger.info(
        "Tree induction finished",
        samples=len(training_set),
        leaves=tree.num_leaves,
        depth=tree.depth,
    )
    return tree


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


@dataclass
class _TreeInducer:
    """Recursive driver that fills a `NodeStore` for one training run."""

    store: NodeStore
    config: TrainingConfig
    rng: RandomSource
    num_outer_iterations: int

    def grow(self, working_set: TrainingSet, *, node_index: int, depth: int) -> None:
        """Resolve slot `node_index` and, for splits, its subtrees.

        The depth limit is checked before any split search, so a node at
        `max_depth` is always a leaf.

        Args:
            working_set (TrainingSet): Patches reaching this node.
            node_index (int): Slot to resolve.
            depth (int): Depth of the slot.
        """
        if depth >= self.config.max_depth:
            self.make_leaf(working_set, node_index=node_index, reason="max_depth")
            return

        split = search_split(
            working_set,
            self.rng,
            num_outer_iterations=self.num_outer_iterations,
            num_threshold_trials=self.config.num_threshold_trials,
        )
        if split is None:
            self.make_leaf(working_set, node_index=node_index, reason="no_split")
            return

        self.store.write_internal(node_index, split.test)
        _log_split(node_index, depth, split.test, len(split.part_a), len(split.part_b))

        for child_index, partition in (
            (NodeStore.left_child(node_index), split.part_a),
            (NodeStore.right_child(node_index), split.part_b),
        ):
            if len(partition) > self.config.min_samples:
                self.grow(partition, node_index=child_index, depth=depth + 1)
            else:
                self.make_leaf(partition, node_index=child_index, reason="min_samples")

    def make_leaf(self, working_set: TrainingSet, *, node_index: int, reason: LeafReason) -> int:
        """Materialize a leaf for `working_set` at slot `node_index`.

        Args:
            working_set (TrainingSet): Patches reaching the leaf.
            node_index (int): Slot to write.
            reason (LeafReason): Why the node stopped splitting.

        Returns:
            int: The assigned leaf index.
        """
        leaf_index = self.store.write_leaf(node_index, make_leaf_node(working_set))
        logger.log(
            GROWTH_LEVEL,
            "Leaf created",
            node_index=node_index,
            leaf_index=leaf_index,
            samples=len(working_set),
            reason=reason,
        )
        return leaf_index


def _log_split(node_index: int, depth: int, test: BinaryTest, left: int, right: int) -> None:
    """Emit a GROWTH record for a new split node."""
    logger.log(
        GROWTH_LEVEL,
        "Split created",
        node_index=node_index,
        depth=depth,
        test=(test.x1, test.y1, test.x2, test.y2, test.threshold),
        left=left,
        right=right,
    )
