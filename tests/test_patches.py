"""Tests for ImagePatch, training set validation and label stacking."""

from __future__ import annotations

import numpy as np
import pytest
from pytest_check import check

from posetree.exceptions import (
    EmptyTrainingSetError,
    InvalidPatchError,
    PatchShapeMismatchError,
    TrainingSetError,
)
from posetree.patches import ImagePatch, target_matrix, validate_training_set


class TestImagePatch:
    """Tests for ImagePatch construction and pixel access."""

    def test_intensity_reads_column_then_row(self) -> None:
        """`intensity(x, y)` should read column `x` of row `y`."""
        # Arrange
        pixels = np.array([[1, 2, 3], [4, 5, 6]], dtype=np.uint8)

        # Act
        patch = ImagePatch(pixels, pitch=0.0, yaw=0.0)

        # Assert
        with check:
            assert patch.intensity(2, 0) == 3
        with check:
            assert patch.intensity(0, 1) == 4
        with check:
            assert (patch.width, patch.height) == (3, 2)

    def test_intensity_is_python_int_so_differences_are_signed(self) -> None:
        """Differences of uint8 intensities must not wrap around."""
        # Arrange
        patch = ImagePatch(np.array([[10, 250]], dtype=np.uint8), pitch=0.0, yaw=0.0)

        # Act
        difference = patch.intensity(0, 0) - patch.intensity(1, 0)

        # Assert
        assert difference == -240

    def test_pixels_are_copied_and_read_only(self) -> None:
        """Mutating the caller's array must not affect the patch, and the patch array is frozen."""
        # Arrange
        pixels = np.zeros((2, 2), dtype=np.uint8)
        patch = ImagePatch(pixels, pitch=1.0, yaw=2.0)

        # Act
        pixels[0, 0] = 99

        # Assert
        with check:
            assert patch.intensity(0, 0) == 0
        with check, pytest.raises(ValueError):
            patch.pixels[0, 0] = 1

    def test_labels_are_coerced_to_float(self) -> None:
        """Integer labels should be stored as floats."""
        # Act
        patch = ImagePatch(np.zeros((1, 1), dtype=np.uint8), pitch=3, yaw=-4)

        # Assert
        with check:
            assert isinstance(patch.pitch, float)
        with check:
            assert patch.yaw == -4.0

    @pytest.mark.parametrize(
        "pixels",
        [np.zeros((2, 2, 3), dtype=np.uint8), np.zeros(4, dtype=np.uint8)],
        ids=["three-dimensional", "one-dimensional"],
    )
    def test_rejects_non_two_dimensional_arrays(self, pixels: np.ndarray) -> None:
        """Only single-channel 2-D grids are valid patches."""
        with pytest.raises(InvalidPatchError, match="2-D"):
            ImagePatch(pixels, pitch=0.0, yaw=0.0)

    def test_rejects_float_pixels(self) -> None:
        """Float pixel arrays should be rejected."""
        with pytest.raises(InvalidPatchError, match="integer dtype") as exc_info:
            ImagePatch(np.zeros((2, 2), dtype=np.float32), pitch=0.0, yaw=0.0)

        with check:
            assert exc_info.value.dtype == "float32"

    def test_patches_compare_by_identity(self) -> None:
        """Two patches with identical content are still distinct training samples."""
        # Arrange
        first = ImagePatch(np.zeros((1, 1), dtype=np.uint8), pitch=0.0, yaw=0.0)
        second = ImagePatch(np.zeros((1, 1), dtype=np.uint8), pitch=0.0, yaw=0.0)

        # Assert
        assert first != second


class TestValidateTrainingSet:
    """Tests for `validate_training_set`."""

    def test_returns_shared_width_and_height(self) -> None:
        """A uniform set returns its ``(width, height)``."""
        # Arrange
        patches = [ImagePatch(np.zeros((4, 6), dtype=np.uint8), pitch=0.0, yaw=0.0) for _ in range(3)]

        # Act
        size = validate_training_set(patches)

        # Assert
        assert size == (6, 4)

    def test_empty_set_raises(self) -> None:
        """An empty training set is a programming error."""
        with pytest.raises(EmptyTrainingSetError):
            validate_training_set([])

    def test_shape_mismatch_reports_position(self) -> None:
        """A mismatching patch should be reported with its position and shapes."""
        # Arrange
        patches = [
            ImagePatch(np.zeros((4, 4), dtype=np.uint8), pitch=0.0, yaw=0.0),
            ImagePatch(np.zeros((4, 4), dtype=np.uint8), pitch=0.0, yaw=0.0),
            ImagePatch(np.zeros((4, 5), dtype=np.uint8), pitch=0.0, yaw=0.0),
        ]

        # Act
        with pytest.raises(PatchShapeMismatchError) as exc_info:
            validate_training_set(patches)

        # Assert
        with check:
            assert exc_info.value.position == 2
        with check:
            assert exc_info.value.expected == (4, 4)
        with check:
            assert exc_info.value.found == (4, 5)
        with check:
            assert isinstance(exc_info.value, TrainingSetError)


class TestTargetMatrix:
    """Tests for `target_matrix`."""

    def test_stacks_pitch_and_yaw_rows(self) -> None:
        """Rows should be ``(pitch, yaw)`` in training set order."""
        # Arrange
        patches = [
            ImagePatch(np.zeros((1, 1), dtype=np.uint8), pitch=1.0, yaw=2.0),
            ImagePatch(np.zeros((1, 1), dtype=np.uint8), pitch=-3.0, yaw=4.5),
        ]

        # Act
        targets = target_matrix(patches)

        # Assert
        np.testing.assert_array_equal(targets, np.array([[1.0, 2.0], [-3.0, 4.5]]))

    def test_empty_set_gives_empty_two_column_matrix(self) -> None:
        """An empty set should still give a ``(0, 2)`` matrix."""
        assert target_matrix([]).shape == (0, 2)
