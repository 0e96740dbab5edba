"""Custom exceptions for tree induction.

Every exception defined here signals a programming error on the caller side or
inside the package. None of them are part of the recoverable failure path:
a split search that finds nothing returns ``None`` and the inducer falls back
to a leaf without raising.

Storage exceptions (subclass IndexError):
- NodeIndexError: Raised when a node slot or leaf slot lies outside the
  fixed-capacity storage.

Training set exceptions (subclass ValueError):
- TrainingSetError: Base class for all training set validation errors.
- EmptyTrainingSetError: Raised when induction is started without patches.
- PatchShapeMismatchError: Raised when patches in one set differ in size.
- InvalidPatchError: Raised when a pixel array is not a 2-D integer grid.
"""

from __future__ import annotations


class NodeIndexError(IndexError):
    """Raised when a node or leaf index is outside the fixed storage bounds.

    Attributes:
        index (int): The offending index.
        capacity (int): Number of slots available.
        kind (str): Either ``"node"`` or ``"leaf"``.

    Examples:
        >>> err = NodeIndexError(index=7, capacity=7, kind="node")
        >>> err.capacity
        7
    """

    index: int
    capacity: int
    kind: str

    def __init__(self, index: int, capacity: int, kind: str = "node") -> None:
        """Initialize NodeIndexError.

        Args:
            index (int): The offending index.
            capacity (int): Number of slots available.
            kind (str): Either ``"node"`` or ``"leaf"``. Defaults to ``"node"``.
        """
        super().__init__(f"{kind} index {index} out of range [0, {capacity})")
        self.index = index
        self.capacity = capacity
        self.kind = kind


class TrainingSetError(ValueError):
    """Base exception for training set validation errors."""


class EmptyTrainingSetError(TrainingSetError):
    """Raised when tree induction is started with no patches."""

    def __init__(self) -> None:
        """Initialize EmptyTrainingSetError."""
        super().__init__("Training set must contain at least one patch")


class PatchShapeMismatchError(TrainingSetError):
    """Raised when patches within one training set have different dimensions.

    Attributes:
        expected (tuple[int, int]): ``(height, width)`` of the first patch.
        found (tuple[int, int]): ``(height, width)`` of the mismatching patch.
        position (int): Position of the mismatching patch in the training set.

    Examples:
        >>> err = PatchShapeMismatchError(expected=(8, 8), found=(8, 6), position=3)
        >>> err.position
        3
    """

    expected: tuple[int, int]
    found: tuple[int, int]
    position: int

    def __init__(self, expected: tuple[int, int], found: tuple[int, int], position: int) -> None:
        """Initialize PatchShapeMismatchError.

        Args:
            expected (tuple[int, int]): ``(height, width)`` of the first patch.
            found (tuple[int, int]): ``(height, width)`` of the mismatching patch.
            position (int): Position of the mismatching patch in the training set.
        """
        super().__init__(f"Patch at position {position} has shape {found}, expected {expected}")
        self.expected = expected
        self.found = found
        self.position = position

    def __repr__(self) -> str:
        """Return detailed representation for debugging.

        Returns:
            str: Representation including expected and found shapes.
        """
        return (
            f"{self.__class__.__name__}("
            f"expected={self.expected!r}, found={self.found!r}, position={self.position!r})"
        )


class InvalidPatchError(TrainingSetError):
    """Raised when a pixel array cannot be used as a single-channel patch.

    Attributes:
        shape (tuple[int, ...]): Shape of the rejected array.
        dtype (str): Data type of the rejected array.
    """

    shape: tuple[int, ...]
    dtype: str

    def __init__(self, message: str, *, shape: tuple[int, ...], dtype: str) -> None:
        """Initialize InvalidPatchError.

        Args:
            message (str): Description of the problem.
            shape (tuple[int, ...]): Shape of the rejected array.
            dtype (str): Data type of the rejected array.
        """
        super().__init__(message)
        self.shape = shape
        self.dtype = dtype
