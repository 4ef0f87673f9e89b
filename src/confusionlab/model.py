from __future__ import annotations

from dataclasses import dataclass
from importlib import import_module
from typing import Any
import logging

import numpy as np
from numpy.typing import NDArray, ArrayLike
from sklearn.base import BaseEstimator, clone
from sklearn.svm import SVC

from confusionlab.datasets.base import LabeledDataset

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------
# Estimator construction (config-friendly)
# ---------------------------------------------------------------------

def _import_object(dotted: str) -> Any:
    mod, name = dotted.rsplit(".", 1)
    return getattr(import_module(mod), name)

def default_estimator() -> SVC:
    """Linear maximum-margin classifier; multiclass via one-vs-one."""
    return SVC(kernel="linear", C=1.0)

def make_estimator(spec: Any = None) -> BaseEstimator:
    """
    Accepts:
      - None -> :func:`default_estimator`
      - a ready sklearn estimator instance (cloned, never fitted in place)
      - {"class": "sklearn.svm.SVC", "params": {...}}
    """
    if spec is None:
        return default_estimator()
    if isinstance(spec, BaseEstimator):
        return clone(spec)
    if isinstance(spec, dict) and "class" in spec:
        cls = _import_object(spec["class"])
        return cls(**dict(spec.get("params") or {}))
    raise TypeError(f"Unsupported estimator spec: {spec!r}")


# ---------------------------------------------------------------------
# Training / inference API
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class ClassifierState:
    estimator: BaseEstimator            # fitted; treat as read-only
    classes: tuple[int, ...]            # labels seen during fit
    n_features: int                     # feature dimension seen during fit

    @property
    def support_vectors(self) -> NDArray[np.floating] | None:
        return getattr(self.estimator, "support_vectors_", None)

    @property
    def n_support(self) -> NDArray[np.integer] | None:
        return getattr(self.estimator, "n_support_", None)


def fit_classifier(
    train: LabeledDataset,
    spec: Any = None,
    *,
    random_state: int | None = None,
) -> ClassifierState:
    """
    Fit a classifier on `train` and freeze the result.

    - `spec` follows :func:`make_estimator`; the default is a linear SVC.
    - `random_state` is forwarded when the estimator exposes that parameter
      and the spec did not set it.
    - `train` is not modified.
    """
    classes = np.unique(train.labels)
    if classes.size < 2:
        raise ValueError(
            f"training data must contain at least 2 distinct labels; got {classes.tolist()}"
        )

    est = make_estimator(spec)
    if random_state is not None and "random_state" in est.get_params():
        if est.get_params()["random_state"] is None:
            est.set_params(random_state=random_state)

    # fit on copies so estimators that rescale in place cannot touch the dataset
    est.fit(train.features.copy(), train.labels.copy())

    state = ClassifierState(
        estimator=est,
        classes=tuple(int(c) for c in classes),
        n_features=train.n_features,
    )
    if state.n_support is not None:
        logger.info(
            "Fitted %s on %d samples; support vectors per class: %s",
            type(est).__name__, len(train), np.asarray(state.n_support).tolist(),
        )
    else:
        logger.info("Fitted %s on %d samples", type(est).__name__, len(train))
    return state


def predict(state: ClassifierState, features: ArrayLike) -> NDArray[np.int64] | int:
    """
    Predict labels with a fitted state.

    A single feature vector of shape ``(d,)`` returns one ``int``; a batch of
    shape ``(n, d)`` returns an array of ``n`` labels.
    """
    X = np.asarray(features, dtype=np.float64)
    single = X.ndim == 1
    if single:
        X = X.reshape(1, -1)
    if X.ndim != 2:
        raise ValueError(f"features must be 1-D or 2-D; got ndim={X.ndim}")
    if X.shape[1] != state.n_features:
        raise ValueError(
            f"features must have {state.n_features} columns; got {X.shape[1]}"
        )

    y_hat = np.asarray(state.estimator.predict(X)).astype(np.int64, copy=False)
    if single:
        return int(y_hat[0])
    return y_hat
