"""Optional on-disk cache of a train/test split (joblib)."""

from __future__ import annotations

from pathlib import Path
from typing import Any
import hashlib
import json
import logging

import joblib
import numpy as np

from confusionlab.datasets.base import LabeledDataset
from confusionlab.split import Split

logger = logging.getLogger(__name__)

_ARRAY_KEYS = ("X_train", "X_test", "y_train", "y_test")
_REQUIRED_KEYS = _ARRAY_KEYS + ("label_set", "test_fraction", "seed", "fingerprint")


class DatasetCacheError(Exception):
    """Raised when a cached split cannot be read back or does not match."""


def compute_fingerprint(params: dict[str, Any]) -> str:
    """
    Deterministic SHA-256 of the parameters that produced a split.

    Keys are sorted and tuples serialize like lists, so
    ``{"centers": [(0, 0)]}`` and ``{"centers": [[0, 0]]}`` agree.
    """
    payload = json.dumps(params, sort_keys=True, default=str)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def save_split(split: Split, path: str | Path, fingerprint: str = "") -> Path:
    """Write the four split arrays plus metadata to `path`."""
    out = Path(path).expanduser()
    out.parent.mkdir(parents=True, exist_ok=True)
    blob = {
        "X_train": split.train.features,
        "X_test": split.test.features,
        "y_train": split.train.labels,
        "y_test": split.test.labels,
        "label_set": list(split.train.label_set),
        "test_fraction": split.test_fraction,
        "seed": split.seed,
        "fingerprint": fingerprint,
    }
    joblib.dump(blob, out)
    logger.info("Cached split (train=%d, test=%d) -> %s", len(split.train), len(split.test), out)
    return out


def load_split(path: str | Path, fingerprint: str | None = None) -> Split:
    """
    Read a split written by :func:`save_split`.

    Args:
        path: Cache file.
        fingerprint: When given, must equal the stored fingerprint.

    Raises:
        FileNotFoundError: If `path` does not exist.
        DatasetCacheError: If the file is truncated, not a split blob, or was
            produced by different parameters.
    """
    src = Path(path).expanduser()
    if not src.exists():
        raise FileNotFoundError(f"Dataset cache not found: {src}")

    try:
        blob = joblib.load(src)
    except Exception as exc:  # joblib/pickle raise a wide range of errors on bad input
        raise DatasetCacheError(f"Failed to read dataset cache {src}: {exc}") from exc

    if not isinstance(blob, dict):
        raise DatasetCacheError(f"Dataset cache {src} holds {type(blob).__name__}, expected a mapping")
    missing = [k for k in _REQUIRED_KEYS if k not in blob]
    if missing:
        raise DatasetCacheError(f"Dataset cache {src} is missing keys: {missing}")
    for key in _ARRAY_KEYS:
        if not isinstance(blob[key], np.ndarray):
            raise DatasetCacheError(f"Dataset cache {src}: '{key}' is not an array")

    if fingerprint is not None and blob["fingerprint"] != fingerprint:
        raise DatasetCacheError(
            f"Dataset cache {src} was built from different parameters "
            f"(stored fingerprint {blob['fingerprint'][:12]}..., expected {fingerprint[:12]}...); "
            "delete it or switch data.cache.mode to 'write'"
        )

    label_set = tuple(int(v) for v in blob["label_set"])
    try:
        split = Split(
            train=LabeledDataset(blob["X_train"], blob["y_train"], label_set),
            test=LabeledDataset(blob["X_test"], blob["y_test"], label_set),
            test_fraction=float(blob["test_fraction"]),
            seed=blob["seed"],
        )
    except ValueError as exc:
        raise DatasetCacheError(f"Dataset cache {src} holds inconsistent arrays: {exc}") from exc

    logger.info("Loaded cached split (train=%d, test=%d) <- %s", len(split.train), len(split.test), src)
    return split
