from __future__ import annotations
import argparse
import json
import logging
from typing import Sequence

from confusionlab.config import load_and_merge, resolve_config
from confusionlab.core import ExperimentRunner
from confusionlab.logging_utils import setup_colored_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="confusionlab",
        description="Train a classifier on synthetic blobs and report its confusion matrix.",
    )
    p.add_argument(
        "--config", action="append", required=True,
        help="YAML config file; repeat to layer overrides (later files win)",
    )
    p.add_argument("--no-show", action="store_true", help="do not open a plot window")
    p.add_argument("--output-dir", default=None, help="override report.output_dir")
    return p


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    raw = load_and_merge(args.config)
    if args.no_show or args.output_dir is not None:
        report = dict(raw.get("report") or {})
        if args.no_show:
            report["show"] = False
        if args.output_dir is not None:
            report["output_dir"] = args.output_dir
        raw["report"] = report

    setup_colored_logging(raw)
    cfg = resolve_config(raw)
    logger.info("Running experiment '%s' (seed=%d)", cfg.exp_name, cfg.seed)

    result = ExperimentRunner(cfg).run()

    summary = {
        "exp_name": cfg.exp_name,
        "train_size": result.split_sizes[0],
        "test_size": result.split_sizes[1],
        "accuracy": result.metrics["accuracy"],
        "artifacts": {k: str(v) for k, v in result.artifacts.items()},
    }
    print(json.dumps(summary, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
