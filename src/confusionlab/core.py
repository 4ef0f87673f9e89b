# Pipeline runner: generate -> split -> fit -> evaluate -> report
from __future__ import annotations
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import matplotlib.pyplot as plt  # type: ignore[import]

from .cache import compute_fingerprint, load_split, save_split
from .config import PipelineConfig
from .datasets import blobs  # noqa: F401  (registers "blobs")
from .evaluation import ConfusionMatrix, evaluate, summarize
from .model import ClassifierState, fit_classifier
from .registry import create_dataset
from .reporting import format_confusion_matrix, plot_confusion_matrix, plot_dataset, save_figure
from .split import Split, split_dataset

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    split_sizes: tuple[int, int]            # (train, test)
    confusion: ConfusionMatrix              # as configured (raw or normalized)
    raw_confusion: ConfusionMatrix          # integer counts
    metrics: dict[str, Any]
    state: ClassifierState
    artifacts: dict[str, Path] = field(default_factory=dict)


class ExperimentRunner:
    def __init__(self, cfg: PipelineConfig):
        self.cfg = cfg

    def _fingerprint(self) -> str:
        return compute_fingerprint({
            "dataset": self.cfg.dataset_name,
            "params": self.cfg.dataset_params,
            "seed": self.cfg.seed,
            "test_fraction": self.cfg.test_fraction,
            "stratify": self.cfg.stratify,
        })

    def _generate_split(self) -> Split:
        params = dict(self.cfg.dataset_params)
        params.setdefault("random_seed", self.cfg.seed)
        ds = create_dataset(self.cfg.dataset_name, **params).load()
        logger.info(
            "Generated dataset '%s': %d samples, %d features, labels %s",
            self.cfg.dataset_name, len(ds), ds.n_features, list(ds.label_set),
        )
        if self.cfg.plot_dataset and self.cfg.output_dir is not None:
            fig = plot_dataset(ds, title=f"{self.cfg.exp_name}: generated samples")
            try:
                save_figure(fig, self.cfg.output_dir / "dataset.png")
            finally:
                plt.close(fig)
        return split_dataset(ds, self.cfg.test_fraction, self.cfg.seed, stratify=self.cfg.stratify)

    def load_or_build_split(self) -> Split:
        mode, path = self.cfg.cache_mode, self.cfg.cache_path
        fingerprint = self._fingerprint()

        if mode == "read" or (mode == "auto" and path is not None and path.exists()):
            return load_split(path, fingerprint=fingerprint)

        split = self._generate_split()
        if mode in ("write", "auto") and path is not None:
            save_split(split, path, fingerprint=fingerprint)
        return split

    def run(self) -> RunResult:
        split = self.load_or_build_split()

        state = fit_classifier(split.train, self.cfg.model_spec, random_state=self.cfg.seed)

        raw_cm = evaluate(state, split.test)
        cm = raw_cm.normalized_copy() if self.cfg.normalize else raw_cm
        metrics = summarize(state, split.test)

        logger.info("Confusion matrix (rows=true, cols=predicted):\n%s", format_confusion_matrix(cm))
        logger.info("Test accuracy: %.4f", metrics["accuracy"])

        result = RunResult(
            split_sizes=split.sizes,
            confusion=cm,
            raw_confusion=raw_cm,
            metrics=metrics,
            state=state,
        )

        fig = plot_confusion_matrix(
            cm,
            class_names=self.cfg.class_names,
            title=self.cfg.title,
            cmap=self.cfg.cmap,
        )
        try:
            if self.cfg.output_dir is not None:
                out_dir = self.cfg.output_dir.expanduser()
                result.artifacts["confusion_matrix"] = save_figure(fig, out_dir / "confusion_matrix.png")
                result.artifacts["results"] = self._write_results(out_dir, result)
            if self.cfg.show:
                plt.show()
        finally:
            plt.close(fig)
        return result

    def _write_results(self, out_dir: Path, result: RunResult) -> Path:
        out_dir.mkdir(parents=True, exist_ok=True)
        payload = {
            "exp_name": self.cfg.exp_name,
            "seed": self.cfg.seed,
            "train_size": result.split_sizes[0],
            "test_size": result.split_sizes[1],
            "labels": list(result.raw_confusion.labels),
            "confusion_matrix": result.raw_confusion.values.tolist(),
            "confusion_matrix_normalized": result.raw_confusion.normalized_copy().values.tolist(),
            "metrics": result.metrics,
        }
        path = out_dir / "results.json"
        path.write_text(json.dumps(payload, indent=2))
        logger.info("Saved results -> %s", path)
        return path
