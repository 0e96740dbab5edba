"""Information gain of a split under a bivariate Gaussian model of the pose.

The gain of splitting a parent set ``P`` into ``A`` and ``B`` is

    IG = log|Σ(P)| - w_A log|Σ(A)| - w_B log|Σ(B)|,   w_i = |i| / |P|

where ``Σ`` is the population covariance of the ``(pitch, yaw)`` labels. A
higher value means both children are more concentrated than the parent.
"""

from __future__ import annotations

import math

import numpy as np

from posetree.patches import TrainingSet, target_matrix


def target_covariance(patches: TrainingSet) -> np.ndarray:
    """Compute the population covariance of the ``(pitch, yaw)`` labels.

    Args:
        patches (TrainingSet): The patches whose labels are summarized.

    Returns:
        np.ndarray: A 2x2 covariance matrix normalized by the sample count.
            An empty set yields a matrix of NaN.
    """
    targets = target_matrix(patches)
    if targets.shape[0] == 0:
        return np.full((2, 2), np.nan)
    return np.atleast_2d(np.cov(targets, rowvar=False, bias=True))


def log_determinant(covariance: np.ndarray) -> float:
    """Return ``log(det(covariance))``.

    Args:
        covariance (np.ndarray): A square matrix.

    Returns:
        float: The natural log of the determinant; ``-inf`` for a singular
            matrix and NaN for a negative or undefined determinant.
    """
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(np.log(np.linalg.det(covariance)))


def measure_information_gain(parent: TrainingSet, part_a: TrainingSet, part_b: TrainingSet) -> float:
    """Score the split of `parent` into `part_a` and `part_b`.

    Any non-finite score is reported as ``-inf``. This happens when a
    covariance is singular, e.g. a child holding a single patch or labels that
    lie on a line, and it keeps NaN out of every later comparison.

    Args:
        parent (TrainingSet): The working set before the split.
        part_a (TrainingSet): Patches routed left.
        part_b (TrainingSet): Patches routed right.

    Returns:
        float: The information gain, or ``-inf`` when it is not finite.

    Examples:
        >>> measure_information_gain([], [], [])
        -inf
    """
    if len(parent) == 0:
        return -math.inf

    weight_a = len(part_a) / len(parent)
    weight_b = len(part_b) / len(parent)

    gain = (
        log_determinant(target_covariance(parent))
        - weight_a * log_determinant(target_covariance(part_a))
        - weight_b * log_determinant(target_covariance(part_b))
    )

    if not math.isfinite(gain):
        return -math.inf
    return gain
