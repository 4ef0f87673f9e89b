import numpy as np
import pytest

from confusionlab.datasets.base import LabeledDataset
from confusionlab.datasets.blobs import make_blobs_dataset
from confusionlab.split import compute_test_size, split_dataset


@pytest.fixture
def indexed_dataset() -> LabeledDataset:
    # feature 0 is the row index so rows can be traced through the split
    n = 101
    X = np.column_stack([np.arange(n, dtype=float), np.zeros(n)])
    y = np.arange(n) % 3
    return LabeledDataset(X, y, label_set=(0, 1, 2))


# --------- compute_test_size ---------

@pytest.mark.parametrize(
    "n, fraction, expected",
    [
        (5000, 0.33, 1650),
        (10, 0.25, 3),    # 2.5 rounds up
        (10, 0.24, 2),
        (101, 0.5, 51),   # 50.5 rounds up
        (2, 0.01, 1),     # never empty
        (2, 0.99, 1),     # train never empty
    ],
)
def test_compute_test_size(n, fraction, expected):
    assert compute_test_size(n, fraction) == expected


# --------- split_dataset ---------

def test_split_is_disjoint_partition(indexed_dataset: LabeledDataset):
    split = split_dataset(indexed_dataset, 0.3, seed=0)
    train_ids = set(split.train.features[:, 0].astype(int).tolist())
    test_ids = set(split.test.features[:, 0].astype(int).tolist())
    assert train_ids.isdisjoint(test_ids)
    assert train_ids | test_ids == set(range(len(indexed_dataset)))
    assert split.sizes == (101 - 30, 30)


def test_split_keeps_rows_paired(indexed_dataset: LabeledDataset):
    split = split_dataset(indexed_dataset, 0.4, seed=5)
    for part in (split.train, split.test):
        assert np.array_equal(part.labels, part.features[:, 0].astype(int) % 3)
        assert part.label_set == (0, 1, 2)


def test_split_seed_reproducible(indexed_dataset: LabeledDataset):
    a = split_dataset(indexed_dataset, 0.3, seed=7)
    b = split_dataset(indexed_dataset, 0.3, seed=7)
    c = split_dataset(indexed_dataset, 0.3, seed=8)
    assert np.array_equal(a.test.features, b.test.features)
    assert np.array_equal(a.train.labels, b.train.labels)
    assert not np.array_equal(a.test.features, c.test.features)


def test_split_scenario_sizes():
    ds = make_blobs_dataset(5000, [(0, 0), (5, 5), (0, 5), (2, 3)], 1.3, random_seed=42)
    split = split_dataset(ds, 0.33, seed=42)
    assert split.sizes == (3350, 1650)
    assert split.test_fraction == 0.33 and split.seed == 42


def test_split_stratified_keeps_proportions():
    X = np.zeros((100, 2))
    y = np.array([0] * 80 + [1] * 20)
    split = split_dataset(LabeledDataset(X, y), 0.25, seed=0, stratify=True)
    assert split.test.class_counts() == {0: 20, 1: 5}


@pytest.mark.parametrize("fraction", [0, 0.0, 1, 1.0, -0.2, 1.5])
def test_split_rejects_fraction_out_of_range(indexed_dataset: LabeledDataset, fraction):
    with pytest.raises(ValueError, match=r"test_fraction must be in \(0,1\)"):
        split_dataset(indexed_dataset, fraction, seed=0)


def test_split_rejects_non_numeric_fraction(indexed_dataset: LabeledDataset):
    with pytest.raises(ValueError, match="test_fraction must be a number"):
        split_dataset(indexed_dataset, "0.3", seed=0)  # type: ignore[arg-type]


def test_split_rejects_single_sample():
    ds = LabeledDataset(np.zeros((1, 2)), np.array([0]))
    with pytest.raises(ValueError, match="at least 2 samples"):
        split_dataset(ds, 0.5, seed=0)
