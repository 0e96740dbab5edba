"""Randomized search for the binary test and threshold with the highest gain."""

from __future__ import annotations

import bisect
import math
from dataclasses import dataclass

from loguru import logger

from posetree.binary_test import BinaryTest, ScoredIndex, evaluate_test, generate_test
from posetree.information_gain import measure_information_gain
from posetree.patches import ImagePatch, TrainingSet
from posetree.random_source import RandomSource


@dataclass(frozen=True)
class SplitResult:
    """The best split found for one working set.

    Attributes:
        test (BinaryTest): The winning test, with its threshold set.
        part_a (list[ImagePatch]): Patches with ``difference <= threshold``.
        part_b (list[ImagePatch]): Patches with ``difference > threshold``.
        score (float): Information gain of the split (``-inf`` if not finite).
    """

    test: BinaryTest
    part_a: list[ImagePatch]
    part_b: list[ImagePatch]
    score: float


def split_by_threshold(
    training_set: TrainingSet,
    scored: list[ScoredIndex],
    threshold: int,
) -> tuple[list[ImagePatch], list[ImagePatch]]:
    """Partition `training_set` around `threshold` using sorted test responses.

    The cut is the upper bound of `threshold` in the sorted differences, so a
    patch whose difference equals the threshold lands in the first part.

    Args:
        training_set (TrainingSet): The unsorted working set.
        scored (list[ScoredIndex]): Output of `evaluate_test` for that set.
        threshold (int): The split threshold.

    Returns:
        tuple[list[ImagePatch], list[ImagePatch]]: ``(part_a, part_b)`` where
            `part_a` holds every patch with ``difference <= threshold``.
    """
    cutoff = bisect.bisect_right(scored, threshold, key=lambda item: item.difference)
    part_a = [training_set[item.index] for item in scored[:cutoff]]
    part_b = [training_set[item.index] for item in scored[cutoff:]]
    return part_a, part_b


def search_split(
    training_set: TrainingSet,
    rng: RandomSource,
    *,
    num_outer_iterations: int,
    num_threshold_trials: int,
) -> SplitResult | None:
    """Search random tests and thresholds for the split with the highest gain.

    Each outer iteration draws a test, skips it if every patch gives the same
    response, and otherwise tries `num_threshold_trials` thresholds drawn from
    ``[min_difference, max_difference)``. Splits leaving one side empty are
    rejected. The first split seen is kept until a later one scores strictly
    higher, so ties go to the earliest candidate and a non-finite score only
    stands when nothing finite turns up.

    Args:
        training_set (TrainingSet): The working set; all patches share one shape.
        rng (RandomSource): Source for test coordinates and thresholds.
        num_outer_iterations (int): Number of candidate tests to draw.
        num_threshold_trials (int): Number of thresholds tried per test.

    Returns:
        SplitResult | None: The best split, or `None` when every test was
            degenerate or every threshold left a side empty.
    """
    if len(training_set) == 0:
        return None

    width = training_set[0].width
    height = training_set[0].height

    best: SplitResult | None = None
    degenerate_tests = 0

    for _ in range(num_outer_iterations):
        candidate = generate_test(width, height, rng)
        scored = evaluate_test(training_set, candidate)

        min_difference = scored[0].difference
        max_difference = scored[-1].difference
        if max_difference == min_difference:
            degenerate_tests += 1
            continue

        for _ in range(num_threshold_trials):
            threshold = rng.uniform(min_difference, max_difference)
            part_a, part_b = split_by_threshold(training_set, scored, threshold)
            if not part_a or not part_b:
                continue

            score = measure_information_gain(training_set, part_a, part_b)
            if best is None or score > best.score:
                best = SplitResult(
                    test=candidate.with_threshold(threshold),
                    part_a=part_a,
                    part_b=part_b,
                    score=score,
                )

    if best is None:
        logger.debug(
            "Split search failed",
            samples=len(training_set),
            degenerate_tests=degenerate_tests,
            iterations=num_outer_iterations,
        )
        return None

    logger.debug(
        "Split search succeeded",
        samples=len(training_set),
        score=best.score if math.isfinite(best.score) else str(best.score),
        left=len(best.part_a),
        right=len(best.part_b),
    )
    return best
