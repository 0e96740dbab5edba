"""Shared fixtures for posetree tests."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence

import numpy as np
import pytest

from posetree.patches import ImagePatch


class ScriptedRandomSource:
    """Random source that replays a fixed sequence of draws.

    Every call is recorded as ``(low, high)`` in `calls`. Running out of
    scripted values fails the test immediately.

    Attributes:
        calls (list[tuple[int, int]]): Bounds passed to each `uniform` call.
    """

    def __init__(self, draws: Iterable[int]) -> None:
        """Initialize the source.

        Args:
            draws (Iterable[int]): Values returned by successive `uniform` calls.
        """
        self._draws = list(draws)
        self._position = 0
        self.calls: list[tuple[int, int]] = []

    @property
    def remaining(self) -> int:
        """int: Number of scripted values not yet consumed."""
        return len(self._draws) - self._position

    def uniform(self, low: int, high: int) -> int:
        """Return the next scripted value.

        Args:
            low (int): Lower bound requested by the caller.
            high (int): Upper bound requested by the caller.

        Returns:
            int: The next scripted value.
        """
        self.calls.append((low, high))
        if self._position >= len(self._draws):
            pytest.fail(f"Scripted random source exhausted after {len(self._draws)} draws")
        value = self._draws[self._position]
        self._position += 1
        return value


def make_difference_patch(difference: int, pitch: float = 0.0, yaw: float = 0.0) -> ImagePatch:
    """Build a 2x1 patch whose test ``(0, 0) - (1, 0)`` yields `difference`.

    Args:
        difference (int): Desired intensity difference between the two pixels.
        pitch (float): Pitch label.
        yaw (float): Yaw label.

    Returns:
        ImagePatch: A patch with pixels ``[[difference, 0]]``.
    """
    return ImagePatch(np.array([[difference, 0]], dtype=np.int16), pitch=pitch, yaw=yaw)


def make_pose_patches(count: int, *, seed: int = 0, size: int = 8) -> list[ImagePatch]:
    """Build patches whose brightness at pixel (0, 0) tracks the pose cluster.

    Half the patches are bright at (0, 0) and posed around ``(20, 20)``; the
    other half are dark there and posed around ``(-20, -20)``. The remaining
    pixels are mid-gray noise, so any test touching (0, 0) can separate the
    two clusters.

    Args:
        count (int): Number of patches.
        seed (int): Seed for the numpy generator.
        size (int): Width and height of each patch.

    Returns:
        list[ImagePatch]: The labeled patches.
    """
    generator = np.random.default_rng(seed)
    patches = []
    for index in range(count):
        bright = index % 2 == 0
        pixels = generator.integers(100, 156, size=(size, size), dtype=np.uint8)
        pixels[0, 0] = generator.integers(230, 256) if bright else generator.integers(0, 26)
        center = 20.0 if bright else -20.0
        pitch, yaw = generator.normal(center, 3.0, size=2)
        patches.append(ImagePatch(pixels, pitch=pitch, yaw=yaw))
    return patches


@pytest.fixture
def scripted_rng() -> Callable[[Sequence[int]], ScriptedRandomSource]:
    """Return a factory for `ScriptedRandomSource` objects.

    Returns:
        Callable[[Sequence[int]], ScriptedRandomSource]: Factory taking the draws to replay.
    """
    return ScriptedRandomSource


@pytest.fixture
def difference_patch() -> Callable[..., ImagePatch]:
    """Return the `make_difference_patch` factory.

    Returns:
        Callable[..., ImagePatch]: Factory building 2x1 patches with a known difference.
    """
    return make_difference_patch


@pytest.fixture
def pose_patch_factory() -> Callable[..., list[ImagePatch]]:
    """Return the `make_pose_patches` factory.

    Returns:
        Callable[..., list[ImagePatch]]: Factory building clustered pose patches.
    """
    return make_pose_patches


@pytest.fixture
def pose_patches() -> list[ImagePatch]:
    """Return 60 clustered 8x8 pose patches.

    Returns:
        list[ImagePatch]: Patches from `make_pose_patches(60)`.
    """
    return make_pose_patches(60)
