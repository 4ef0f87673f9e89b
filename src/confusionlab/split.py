"""Train/test partitioning of a labelled dataset.

The test size is computed here (round half up) and passed to scikit-learn as
an absolute count, so the rounding policy is explicit instead of the
library's ceiling rule.
"""

from __future__ import annotations

from dataclasses import dataclass
from numbers import Real
import logging
import math

import numpy as np
from sklearn.model_selection import train_test_split

from confusionlab.datasets.base import LabeledDataset

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Split:
    """Disjoint train and test halves of one dataset."""
    train: LabeledDataset
    test: LabeledDataset
    test_fraction: float
    seed: int | None

    @property
    def sizes(self) -> tuple[int, int]:
        return len(self.train), len(self.test)


def compute_test_size(n_samples: int, test_fraction: float) -> int:
    """
    Number of test rows for `n_samples` at `test_fraction`.

    The product is rounded to the nearest integer (halves go up) and clamped
    so both halves keep at least one sample.

    Examples:
        >>> compute_test_size(5000, 0.33)
        1650
        >>> compute_test_size(10, 0.25)
        3
        >>> compute_test_size(2, 0.01)
        1
    """
    n_test = int(math.floor(n_samples * test_fraction + 0.5))
    return min(max(n_test, 1), n_samples - 1)


def split_dataset(
    dataset: LabeledDataset,
    test_fraction: float,
    seed: int | None = None,
    *,
    stratify: bool = False,
) -> Split:
    """
    Randomly partition `dataset` into train and test subsets.

    Args:
        dataset: Source dataset, at least 2 samples.
        test_fraction: Share of samples for the test subset, in (0, 1).
        seed: Seed for the permutation.
        stratify: Keep label proportions equal across both subsets.

    Returns:
        Split whose halves keep the source label set.

    Raises:
        ValueError: If `test_fraction` is outside (0, 1) or the dataset holds
            fewer than 2 samples.
    """
    if isinstance(test_fraction, bool) or not isinstance(test_fraction, Real):
        raise ValueError(f"test_fraction must be a number in (0,1); got {type(test_fraction).__name__}")
    if not (0.0 < float(test_fraction) < 1.0):
        raise ValueError(f"test_fraction must be in (0,1); got {test_fraction!r}")

    n = len(dataset)
    if n < 2:
        raise ValueError(f"dataset must contain at least 2 samples to split; got {n}")

    n_test = compute_test_size(n, float(test_fraction))
    indices = np.arange(n)
    train_idx, test_idx = train_test_split(
        indices,
        test_size=n_test,
        random_state=seed,
        shuffle=True,
        stratify=dataset.labels if stratify else None,
    )

    split = Split(
        train=dataset.subset(train_idx),
        test=dataset.subset(test_idx),
        test_fraction=float(test_fraction),
        seed=seed,
    )
    logger.info(
        "Split %d samples into train=%d / test=%d (test_fraction=%.3f, seed=%s)",
        n, len(split.train), len(split.test), test_fraction, seed,
    )
    return split
