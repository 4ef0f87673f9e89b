"""Confusion-matrix tabulation and summary metrics for a fitted classifier."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
import logging

import numpy as np
import pandas as pd
from numpy.typing import NDArray
from sklearn.metrics import accuracy_score, confusion_matrix, precision_recall_fscore_support

from confusionlab.datasets.base import LabeledDataset
from confusionlab.model import ClassifierState, predict

logger = logging.getLogger(__name__)


def normalize_rows(values: NDArray[Any]) -> NDArray[np.float64]:
    """
    Divide each row by its sum; rows summing to zero stay zero.

    Examples:
        >>> normalize_rows(np.array([[1, 3], [0, 0]]))
        array([[0.25, 0.75],
               [0.  , 0.  ]])
    """
    arr = np.asarray(values, dtype=np.float64)
    sums = arr.sum(axis=1, keepdims=True)
    out = np.zeros_like(arr)
    np.divide(arr, sums, out=out, where=sums != 0)
    return out


@dataclass(frozen=True)
class ConfusionMatrix:
    """
    Square table indexed by (true label, predicted label).

    Attributes:
        values: Counts (int) or, when ``normalized``, per-row proportions.
        labels: Axis labels shared by rows and columns.
        normalized: Whether rows were divided by their sums.
    """
    values: NDArray[Any]
    labels: tuple[int, ...]
    normalized: bool = False

    def __post_init__(self) -> None:
        v = np.asarray(self.values)
        if v.ndim != 2 or v.shape[0] != v.shape[1]:
            raise ValueError(f"confusion matrix must be square; got shape {v.shape}")
        if v.shape[0] != len(self.labels):
            raise ValueError(
                f"confusion matrix has {v.shape[0]} rows but {len(self.labels)} labels"
            )
        object.__setattr__(self, "values", v)
        object.__setattr__(self, "labels", tuple(int(label) for label in self.labels))

    def row_sums(self) -> NDArray[Any]:
        return np.asarray(self.values).sum(axis=1)

    def total(self) -> float:
        return float(np.asarray(self.values).sum())

    def normalized_copy(self) -> "ConfusionMatrix":
        if self.normalized:
            return self
        return ConfusionMatrix(normalize_rows(self.values), self.labels, normalized=True)

    def to_frame(self) -> pd.DataFrame:
        index = pd.Index(list(self.labels), name="true")
        columns = pd.Index(list(self.labels), name="predicted")
        return pd.DataFrame(np.asarray(self.values), index=index, columns=columns)


def _axis_labels(test: LabeledDataset, y_pred: NDArray[np.int64]) -> list[int]:
    # predicted labels outside the label set still get their own column
    extra = set(np.unique(y_pred).tolist()) - set(test.label_set)
    return sorted(set(test.label_set) | {int(v) for v in extra})


def evaluate(
    state: ClassifierState,
    test: LabeledDataset,
    *,
    normalize: bool = False,
) -> ConfusionMatrix:
    """
    Predict every test sample and tabulate (true, predicted) outcomes.

    Rows and columns cover the test set's full label set, so labels absent
    from the test data show up as zero rows. With ``normalize=True`` each row
    is divided by its sum after tabulation.
    """
    y_pred = np.asarray(predict(state, test.features))
    labels = _axis_labels(test, y_pred)
    counts = confusion_matrix(test.labels, y_pred, labels=labels)

    cm = ConfusionMatrix(counts.astype(np.int64, copy=False), tuple(labels))
    logger.debug("Tabulated %d test samples over labels %s", int(cm.total()), labels)
    return cm.normalized_copy() if normalize else cm


def summarize(state: ClassifierState, test: LabeledDataset) -> dict[str, Any]:
    """
    Accuracy and per-label precision / recall / f1 / support on `test`.

    Returns:
        dict with keys ``accuracy`` (float) and ``per_class`` mapping each
        label to its metrics.
    """
    y_pred = np.asarray(predict(state, test.features))
    labels = _axis_labels(test, y_pred)
    precision, recall, f1, support = precision_recall_fscore_support(
        test.labels, y_pred, labels=labels, zero_division=0
    )
    per_class = {
        int(label): {
            "precision": float(p),
            "recall": float(r),
            "f1": float(f),
            "support": int(s),
        }
        for label, p, r, f, s in zip(labels, precision, recall, f1, support)
    }
    return {"accuracy": float(accuracy_score(test.labels, y_pred)), "per_class": per_class}
