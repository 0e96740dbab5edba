"""posetree: Regression tree induction for patch-based head pose estimation."""

from loguru import logger

from posetree.binary_test import BinaryTest
from posetree.config import TrainingConfig
from posetree.induction import RegressionTree, grow_tree
from posetree.logging import PACKAGE_NAME, enable_logging
from posetree.patches import ImagePatch
from posetree.random_source import NumpyRandomSource, RandomSource
from posetree.summary import TreeSummary, leaf_table, summarize_tree
from posetree.tree_storage import LeafNode

logger.disable(PACKAGE_NAME)  # noqa: RUF067 - Disable logging for the posetree module by default

__all__ = [
    "BinaryTest",
    "ImagePatch",
    "LeafNode",
    "NumpyRandomSource",
    "RandomSource",
    "RegressionTree",
    "TrainingConfig",
    "TreeSummary",
    "enable_logging",
    "grow_tree",
    "leaf_table",
    "summarize_tree",
]
