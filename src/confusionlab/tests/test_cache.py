import joblib
import numpy as np
import pytest

from confusionlab.cache import DatasetCacheError, compute_fingerprint, load_split, save_split
from confusionlab.datasets.blobs import make_blobs_dataset
from confusionlab.split import Split, split_dataset


@pytest.fixture
def split() -> Split:
    ds = make_blobs_dataset(90, [(0, 0), (4, 4), (0, 4)], 1.0, random_seed=5)
    return split_dataset(ds, 0.33, seed=5)


# --------- compute_fingerprint ---------

def test_fingerprint_is_stable_and_order_insensitive():
    a = compute_fingerprint({"seed": 1, "centers": [(0, 0), (1, 1)]})
    b = compute_fingerprint({"centers": [[0, 0], [1, 1]], "seed": 1})
    assert a == b and len(a) == 64
    assert compute_fingerprint({"seed": 2, "centers": [[0, 0], [1, 1]]}) != a


# --------- save_split / load_split ---------

def test_round_trip_is_exact(tmp_path, split: Split):
    path = save_split(split, tmp_path / "cache" / "split.joblib", fingerprint="abc")
    assert path.exists()

    loaded = load_split(path, fingerprint="abc")
    assert loaded.train.features.tobytes() == split.train.features.tobytes()
    assert loaded.test.features.tobytes() == split.test.features.tobytes()
    assert np.array_equal(loaded.train.labels, split.train.labels)
    assert np.array_equal(loaded.test.labels, split.test.labels)
    assert loaded.train.label_set == split.train.label_set == (0, 1, 2)
    assert loaded.test_fraction == split.test_fraction and loaded.seed == split.seed


def test_load_without_fingerprint_skips_check(tmp_path, split: Split):
    path = save_split(split, tmp_path / "split.joblib", fingerprint="abc")
    assert load_split(path).sizes == split.sizes


def test_load_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_split(tmp_path / "absent.joblib")


def test_load_truncated_file_raises(tmp_path, split: Split):
    path = save_split(split, tmp_path / "split.joblib")
    data = path.read_bytes()
    path.write_bytes(data[: len(data) // 2])
    with pytest.raises(DatasetCacheError, match="Failed to read"):
        load_split(path)


def test_load_garbage_file_raises(tmp_path):
    path = tmp_path / "garbage.joblib"
    path.write_bytes(b"not a pickle at all")
    with pytest.raises(DatasetCacheError):
        load_split(path)


def test_load_wrong_structure_raises(tmp_path):
    path = tmp_path / "list.joblib"
    joblib.dump([1, 2, 3], path)
    with pytest.raises(DatasetCacheError, match="expected a mapping"):
        load_split(path)

    path = tmp_path / "partial.joblib"
    joblib.dump({"X_train": np.zeros((2, 2))}, path)
    with pytest.raises(DatasetCacheError, match="missing keys"):
        load_split(path)


def test_load_inconsistent_arrays_raises(tmp_path, split: Split):
    path = tmp_path / "bad.joblib"
    save_split(split, path)
    blob = joblib.load(path)
    blob["y_test"] = blob["y_test"][:-1]
    joblib.dump(blob, path)
    with pytest.raises(DatasetCacheError, match="inconsistent"):
        load_split(path)


def test_load_fingerprint_mismatch_raises(tmp_path, split: Split):
    path = save_split(split, tmp_path / "split.joblib", fingerprint="a" * 64)
    with pytest.raises(DatasetCacheError, match="different parameters"):
        load_split(path, fingerprint="b" * 64)
