from __future__ import annotations
from dataclasses import dataclass, field
from typing import Protocol, Literal

import numpy as np
from numpy.typing import NDArray

Task = Literal["classification"]

FloatArray = NDArray[np.float64]
IntArray = NDArray[np.int64]

# Dataset Protocol + labelled container

class DatasetSource(Protocol):
    name: str
    task: Task

    def load(self) -> "LabeledDataset": ...


@dataclass(frozen=True)
class LabeledDataset:
    """
    Ordered collection of samples: one feature row and one integer label each.

    Attributes:
        features: Array of shape ``(n, d)``.
        labels: Array of shape ``(n,)``.
        label_set: Sorted labels fixed when the data was generated. Subsets
            (e.g. a test split) keep the parent's label set even when some
            labels do not occur in them.

    Raises:
        ValueError: If the dataset is empty, shapes disagree, or a label is
            outside ``label_set``.
    """
    features: FloatArray
    labels: IntArray
    label_set: tuple[int, ...] = field(default=())

    def __post_init__(self) -> None:
        features = np.asarray(self.features, dtype=np.float64)
        labels = np.asarray(self.labels)

        if features.ndim != 2:
            raise ValueError(f"features must be 2-D (n_samples, n_features); got ndim={features.ndim}")
        if features.shape[0] == 0:
            raise ValueError("dataset must contain at least one sample")
        if labels.shape != (features.shape[0],):
            raise ValueError(
                f"labels must have shape ({features.shape[0]},); got {labels.shape}"
            )
        if not np.issubdtype(labels.dtype, np.integer):
            raise ValueError(f"labels must be integers; got dtype {labels.dtype}")
        labels = labels.astype(np.int64, copy=False)

        # label_set may arrive as a list, tuple or ndarray
        given = np.unique(np.asarray(self.label_set, dtype=np.int64).ravel())
        label_set = tuple(int(v) for v in (given if given.size else np.unique(labels)))
        unknown = set(np.unique(labels).tolist()) - set(label_set)
        if unknown:
            raise ValueError(f"labels {sorted(unknown)} are not in label_set {list(label_set)}")

        object.__setattr__(self, "features", features)
        object.__setattr__(self, "labels", labels)
        object.__setattr__(self, "label_set", label_set)

    def __len__(self) -> int:
        return int(self.features.shape[0])

    @property
    def n_features(self) -> int:
        return int(self.features.shape[1])

    def subset(self, indices: NDArray[np.integer]) -> "LabeledDataset":
        """Rows at `indices`, keeping this dataset's label set."""
        idx = np.asarray(indices)
        return LabeledDataset(self.features[idx], self.labels[idx], self.label_set)

    def class_counts(self) -> dict[int, int]:
        """Number of samples per label, including zero counts."""
        counts = {label: 0 for label in self.label_set}
        values, freq = np.unique(self.labels, return_counts=True)
        for v, c in zip(values.tolist(), freq.tolist()):
            counts[int(v)] = int(c)
        return counts
