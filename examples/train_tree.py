"""Demonstrates growing a pose regression tree with logging enabled.

posetree logging is disabled by default. Users opt in by calling ``enable_logging()``,
which returns a ``LoggingHandle`` usable as a context manager.

Key concepts shown here:

- ``TrainingConfig``: hyperparameters, also readable from ``POSETREE_*`` variables.
- ``NumpyRandomSource``: a seeded random source makes the run repeatable.
- ``level="GROWTH"``: the custom level (numeric value 15, between DEBUG and INFO)
  reports every split and leaf as it is created.
- ``summarize_tree`` and ``leaf_table``: inspect the trained tree.
"""

import numpy as np

from posetree import (
    ImagePatch,
    NumpyRandomSource,
    TrainingConfig,
    enable_logging,
    grow_tree,
    leaf_table,
    summarize_tree,
)

generator = np.random.default_rng(0)

# Synthetic 16x16 patches: a bright top-left corner means the head is turned up and right
patches = []
for index in range(400):
    pixels = generator.integers(90, 170, size=(16, 16), dtype=np.uint8)
    looking_up = index % 2 == 0
    pixels[:4, :4] = 240 if looking_up else 15
    pitch, yaw = generator.normal(15.0 if looking_up else -15.0, 4.0, size=2)
    patches.append(ImagePatch(pixels, pitch=pitch, yaw=yaw))

config = TrainingConfig(max_depth=6, min_samples=10, num_outer_iterations=200)

with enable_logging(level="GROWTH", log_format="full"):
    tree = grow_tree(patches, config, rng=NumpyRandomSource(seed=42))

# Logging automatically disabled here
print(summarize_tree(tree, sample_count=len(patches)))
print(leaf_table(tree))
