"""Rendering of confusion matrices and datasets for visual inspection."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence
import logging

import numpy as np
import matplotlib.pyplot as plt  # type: ignore[import]
from matplotlib.axes import Axes  # type: ignore[import]
from matplotlib.figure import Figure  # type: ignore[import]

from confusionlab.datasets.base import LabeledDataset
from confusionlab.evaluation import ConfusionMatrix

logger = logging.getLogger(__name__)


def _cell_text(value: float, normalized: bool) -> str:
    return f"{value:.2f}" if normalized else f"{int(value)}"


def plot_confusion_matrix(
    cm: ConfusionMatrix,
    *,
    class_names: Sequence[str] | None = None,
    title: str | None = None,
    cmap: str = "Blues",
    ax: Axes | None = None,
) -> Figure:
    """
    Draw `cm` as a labelled grid (rows = true, columns = predicted).

    Color intensity is proportional to the cell value; every cell is annotated
    with its count or, for normalized matrices, its proportion.

    Args:
        cm: Matrix to draw.
        class_names: Tick labels; defaults to the matrix labels.
        title: Axes title; defaults to "Confusion matrix" (+ "(normalized)").
        cmap: Matplotlib colormap name.
        ax: Existing axes to draw on; a new figure is created otherwise.

    Returns:
        The figure holding the plot.
    """
    values = np.asarray(cm.values, dtype=np.float64)
    n = values.shape[0]
    names = list(class_names) if class_names is not None else [str(v) for v in cm.labels]
    if len(names) != n:
        raise ValueError(f"class_names must have {n} entries; got {len(names)}")

    if ax is None:
        fig, ax = plt.subplots(figsize=(1.2 * n + 3, 1.2 * n + 2))
    else:
        fig = ax.figure

    vmax = 1.0 if cm.normalized else max(float(values.max()), 1.0)
    im = ax.imshow(values, interpolation="nearest", cmap=cmap, vmin=0.0, vmax=vmax)
    fig.colorbar(im, ax=ax)

    ax.set_xticks(np.arange(n))
    ax.set_yticks(np.arange(n))
    ax.set_xticklabels(names)
    ax.set_yticklabels(names)
    ax.set_xlabel("Predicted label")
    ax.set_ylabel("True label")
    if title is None:
        title = "Confusion matrix (normalized)" if cm.normalized else "Confusion matrix"
    ax.set_title(title)

    threshold = vmax / 2.0
    for i in range(n):
        for j in range(n):
            ax.text(
                j, i, _cell_text(values[i, j], cm.normalized),
                ha="center", va="center",
                color="white" if values[i, j] > threshold else "black",
            )

    fig.tight_layout()
    return fig


def plot_dataset(
    dataset: LabeledDataset,
    *,
    title: str = "Generated samples",
    cmap: str = "viridis",
) -> Figure:
    """Scatter the first two feature dimensions colored by label."""
    if dataset.n_features < 2:
        raise ValueError(f"plot_dataset needs at least 2 features; got {dataset.n_features}")

    fig, ax = plt.subplots(figsize=(6, 6))
    sc = ax.scatter(
        dataset.features[:, 0], dataset.features[:, 1],
        c=dataset.labels, cmap=cmap, s=8, alpha=0.7,
    )
    ax.legend(*sc.legend_elements(), title="label", loc="best")
    ax.set_xlabel("Feature 1")
    ax.set_ylabel("Feature 2")
    ax.set_title(title)
    fig.tight_layout()
    return fig


def format_confusion_matrix(cm: ConfusionMatrix) -> str:
    """Plain-text table of `cm` for logs and terminals."""
    frame = cm.to_frame()
    if cm.normalized:
        return frame.to_string(float_format=lambda v: f"{v:.3f}")
    return frame.to_string()


def save_figure(fig: Figure, path: str | Path, *, dpi: int = 200) -> Path:
    """Write `fig` to `path`, creating parent directories."""
    out = Path(path).expanduser()
    out.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out, dpi=dpi, bbox_inches="tight")
    logger.info("Saved figure -> %s", out)
    return out
