"""Labeled image patches and training set helpers."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np
from loguru import logger

from posetree.exceptions import EmptyTrainingSetError, InvalidPatchError, PatchShapeMismatchError

type TrainingSet = Sequence[ImagePatch]


@dataclass(frozen=True, eq=False)
class ImagePatch:
    """A fixed-size single-channel pixel grid labeled with a head pose.

    The pixel array is copied on construction and marked read-only, so the
    trainer can never modify caller data.

    Attributes:
        pixels (np.ndarray): 2-D integer array indexed as ``pixels[y, x]``.
        pitch (float): Pitch angle label.
        yaw (float): Yaw angle label.

    Examples:
        >>> patch = ImagePatch(np.array([[10, 20], [30, 40]], dtype=np.uint8), pitch=5.0, yaw=-3.0)
        >>> patch.intensity(1, 0)
        20
        >>> (patch.width, patch.height)
        (2, 2)
    """

    pixels: np.ndarray = field(repr=False)
    pitch: float
    yaw: float

    def __post_init__(self) -> None:
        """Validate and freeze the pixel array.

        Raises:
            InvalidPatchError: If the array is not 2-D or not of integer dtype.
        """
        pixels = np.array(self.pixels, copy=True)
        if pixels.ndim != 2:
            raise InvalidPatchError(
                f"Patch pixels must be a 2-D array, got {pixels.ndim} dimensions",
                shape=pixels.shape,
                dtype=str(pixels.dtype),
            )
        if not np.issubdtype(pixels.dtype, np.integer):
            raise InvalidPatchError(
                f"Patch pixels must have an integer dtype, got {pixels.dtype}",
                shape=pixels.shape,
                dtype=str(pixels.dtype),
            )
        pixels.flags.writeable = False
        object.__setattr__(self, "pixels", pixels)
        object.__setattr__(self, "pitch", float(self.pitch))
        object.__setattr__(self, "yaw", float(self.yaw))

    @property
    def width(self) -> int:
        """int: Number of pixel columns."""
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        """int: Number of pixel rows."""
        return int(self.pixels.shape[0])

    @property
    def shape(self) -> tuple[int, int]:
        """tuple[int, int]: ``(height, width)`` of the patch."""
        return (self.height, self.width)

    def intensity(self, x: int, y: int) -> int:
        """Return the intensity of the pixel at column `x`, row `y`.

        Args:
            x (int): Column index.
            y (int): Row index.

        Returns:
            int: The pixel value as a Python int, so differences are signed.
        """
        return int(self.pixels[y, x])


def validate_training_set(patches: TrainingSet) -> tuple[int, int]:
    """Check that a training set is non-empty and uniformly shaped.

    Args:
        patches (TrainingSet): The patches to check.

    Returns:
        tuple[int, int]: The shared ``(width, height)`` of the patches.

    Raises:
        EmptyTrainingSetError: If `patches` is empty.
        PatchShapeMismatchError: If any patch differs in shape from the first.
    """
    if len(patches) == 0:
        logger.warning("Training set rejected", reason="empty")
        raise EmptyTrainingSetError

    expected = patches[0].shape
    for position, patch in enumerate(patches):
        if patch.shape != expected:
            logger.warning("Training set rejected", reason="shape mismatch", position=position)
            raise PatchShapeMismatchError(expected=expected, found=patch.shape, position=position)

    return patches[0].width, patches[0].height


def target_matrix(patches: TrainingSet) -> np.ndarray:
    """Stack the pose labels of `patches` into an ``(n, 2)`` matrix.

    Args:
        patches (TrainingSet): The patches to read labels from.

    Returns:
        np.ndarray: Float64 array whose rows are ``(pitch, yaw)``.
    """
    if len(patches) == 0:
        return np.empty((0, 2), dtype=np.float64)
    return np.array([(patch.pitch, patch.yaw) for patch in patches], dtype=np.float64)
