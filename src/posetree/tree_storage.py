"""Fixed-capacity node arena and leaf records for one regression tree.

Slots follow complete-binary-tree numbering: the root is slot 0 and slot ``i``
has children ``2i + 1`` and ``2i + 2``. A tree of maximum depth ``D`` has
exactly ``2^(D+1) - 1`` slots and at most ``2^D`` leaves. Each slot holds one
of three tagged variants, so "never visited" is distinct from "leaf 0".
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Annotated

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, field_validator, validate_call

from posetree.binary_test import BinaryTest
from posetree.exceptions import NodeIndexError

# ---------------------------------------------------------------------------
# Leaf records
# ---------------------------------------------------------------------------


class LeafNode(BaseModel):
    """Target statistics of the training patches that reached one leaf.

    Attributes:
        count (int): Number of training patches at the leaf.
        mean (tuple[float, float] | None): Mean ``(pitch, yaw)``, `None` when
            the leaf is empty.
        covariance (tuple[tuple[float, float], tuple[float, float]] | None):
            Population covariance of ``(pitch, yaw)``, `None` when the leaf is
            empty.

    Examples:
        >>> leaf = LeafNode(count=2, mean=(1.0, 2.0), covariance=((0.25, 0.0), (0.0, 1.0)))
        >>> leaf.trace
        1.25
        >>> LeafNode(count=0).is_empty
        True
    """

    model_config = ConfigDict(frozen=True)

    count: int = Field(ge=0, description="Number of training patches that reached this leaf.")
    mean: tuple[float, float] | None = Field(
        default=None,
        description="Mean (pitch, yaw) of the patches at this leaf; None for an empty leaf.",
    )
    covariance: tuple[tuple[float, float], tuple[float, float]] | None = Field(
        default=None,
        description="Population covariance of (pitch, yaw) at this leaf; None for an empty leaf.",
    )

    @field_validator("covariance", mode="after")
    @classmethod
    def _validate_covariance_symmetric(
        cls, value: tuple[tuple[float, float], tuple[float, float]] | None
    ) -> tuple[tuple[float, float], tuple[float, float]] | None:
        """Validate that the covariance matrix is symmetric.

        Args:
            value (tuple[tuple[float, float], tuple[float, float]] | None): The matrix.

        Returns:
            tuple[tuple[float, float], tuple[float, float]] | None: The value, unchanged.

        Raises:
            ValueError: If the off-diagonal entries differ.
        """
        if value is not None and value[0][1] != value[1][0]:
            raise ValueError(f"covariance must be symmetric, got {value}")
        return value

    @property
    def is_empty(self) -> bool:
        """bool: Whether no training patch reached this leaf."""
        return self.count == 0

    @property
    def trace(self) -> float | None:
        """float | None: Total variance ``var(pitch) + var(yaw)``, `None` when empty."""
        if self.covariance is None:
            return None
        return self.covariance[0][0] + self.covariance[1][1]


# ---------------------------------------------------------------------------
# Node variants
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Unresolved:
    """A slot that induction never reached."""


@dataclass(frozen=True)
class InternalNode:
    """A split node.

    Attributes:
        test (BinaryTest): The finalized binary test.
        left (int): Slot index of the left child.
        right (int): Slot index of the right child.
    """

    test: BinaryTest
    left: int
    right: int


@dataclass(frozen=True)
class LeafRef:
    """A terminal node pointing into the leaf array.

    Attributes:
        leaf_index (int): Index into `NodeStore.leaves`.
    """

    leaf_index: int


type NodeSlot = Unresolved | InternalNode | LeafRef

UNRESOLVED = Unresolved()

# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------


class NodeStore:
    """Node arena plus dense leaf array for a tree of fixed maximum depth.

    Examples:
        >>> store = NodeStore(max_depth=2)
        >>> store.num_nodes, store.leaf_capacity
        (7, 4)
        >>> store.write_leaf(0, LeafNode(count=0))
        0
        >>> store.num_leaves
        1
    """

    @validate_call
    def __init__(self, max_depth: Annotated[int, Field(ge=0)]) -> None:
        """Allocate storage for a tree of depth at most `max_depth`.

        Args:
            max_depth (int): Maximum tree depth; the root is at depth 0.
        """
        self.max_depth = max_depth
        self._nodes: list[NodeSlot] = [UNRESOLVED] * (2 ** (max_depth + 1) - 1)
        self._leaves: list[LeafNode] = []
        self._leaf_capacity = 2**max_depth

    def __len__(self) -> int:
        """Return the number of node slots.

        Returns:
            int: ``2^(max_depth+1) - 1``.
        """
        return len(self._nodes)

    def __repr__(self) -> str:
        """Return repr(self).

        Returns:
            str: String representation of the store.
        """
        return f"NodeStore(max_depth={self.max_depth}, num_leaves={self.num_leaves})"

    @property
    def num_nodes(self) -> int:
        """int: Number of node slots."""
        return len(self._nodes)

    @property
    def num_leaves(self) -> int:
        """int: Number of leaves written so far; also the next free leaf index."""
        return len(self._leaves)

    @property
    def leaf_capacity(self) -> int:
        """int: Maximum number of leaves, ``2^max_depth``."""
        return self._leaf_capacity

    @property
    def nodes(self) -> tuple[NodeSlot, ...]:
        """tuple[NodeSlot, ...]: Snapshot of all node slots."""
        return tuple(self._nodes)

    @property
    def leaves(self) -> tuple[LeafNode, ...]:
        """tuple[LeafNode, ...]: Snapshot of all leaves in creation order."""
        return tuple(self._leaves)

    @staticmethod
    def left_child(index: int) -> int:
        """Return the slot of the left child of slot `index`."""
        return 2 * index + 1

    @staticmethod
    def right_child(index: int) -> int:
        """Return the slot of the right child of slot `index`."""
        return 2 * index + 2

    @staticmethod
    def depth_of(index: int) -> int:
        """Return the depth of slot `index` (root is 0)."""
        return (index + 1).bit_length() - 1

    def node(self, index: int) -> NodeSlot:
        """Return the slot at `index`.

        Args:
            index (int): Slot index.

        Returns:
            NodeSlot: The variant stored in the slot.

        Raises:
            NodeIndexError: If `index` is out of range.
        """
        self._check_node_index(index)
        return self._nodes[index]

    def leaf(self, index: int) -> LeafNode:
        """Return the leaf record at `index`.

        Args:
            index (int): Leaf index.

        Returns:
            LeafNode: The stored leaf.

        Raises:
            NodeIndexError: If no leaf has been written at `index`.
        """
        if not 0 <= index < len(self._leaves):
            raise NodeIndexError(index=index, capacity=len(self._leaves), kind="leaf")
        return self._leaves[index]

    def write_internal(self, index: int, test: BinaryTest) -> None:
        """Mark slot `index` as a split node with `test`.

        Args:
            index (int): Slot index.
            test (BinaryTest): A finalized test.

        Raises:
            NodeIndexError: If `index` is out of range.
            ValueError: If `test` has no threshold.
        """
        self._check_node_index(index)
        if not test.is_finalized:
            raise ValueError("Internal nodes require a test with a threshold")
        self._nodes[index] = InternalNode(test=test, left=self.left_child(index), right=self.right_child(index))

    def write_leaf(self, index: int, leaf: LeafNode) -> int:
        """Append `leaf` to the leaf array and point slot `index` at it.

        Args:
            index (int): Slot index.
            leaf (LeafNode): The leaf statistics.

        Returns:
            int: The index assigned to the new leaf.

        Raises:
            NodeIndexError: If `index` is out of range or the leaf array is full.
        """
        self._check_node_index(index)
        leaf_index = len(self._leaves)
        if leaf_index >= self._leaf_capacity:
            logger.warning("Leaf capacity exhausted", capacity=self._leaf_capacity, node_index=index)
            raise NodeIndexError(index=leaf_index, capacity=self._leaf_capacity, kind="leaf")
        self._leaves.append(leaf)
        self._nodes[index] = LeafRef(leaf_index=leaf_index)
        return leaf_index

    def iter_resolved(self) -> Iterator[tuple[int, InternalNode | LeafRef]]:
        """Yield ``(index, slot)`` for every slot that was written.

        Yields:
            tuple[int, InternalNode | LeafRef]: Written slots in index order.
        """
        for index, slot in enumerate(self._nodes):
            if not isinstance(slot, Unresolved):
                yield index, slot

    def _check_node_index(self, index: int) -> None:
        """Raise `NodeIndexError` if `index` is not a valid slot.

        Args:
            index (int): Slot index to check.

        Raises:
            NodeIndexError: If `index` is outside ``[0, num_nodes)``.
        """
        if not 0 <= index < len(self._nodes):
            logger.warning("Node index out of range", index=index, num_nodes=len(self._nodes))
            raise NodeIndexError(index=index, capacity=len(self._nodes), kind="node")
