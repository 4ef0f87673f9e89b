"""
Configuration utilities for confusionlab

Provides functions to load, merge, validate and resolve YAML configurations
for confusion-matrix experiments. Used by the runner to parse settings from
files like `configs/blobs.yaml`.
"""

from __future__ import annotations
from dataclasses import dataclass
from numbers import Real
from pathlib import Path
from typing import Any, Sequence

import datetime as dt
import yaml


#########
# Helpers
#########

def _load_yaml(path: str | Path) -> dict[str, Any]:
    """
    Load a YAML file into a dictionary.

    Args:
        path (str | Path): Path to the YAML file.
        It must exist, be readable and contain a YAML mapping.

    Returns:
        dict[str, Any]: Parsed YAML content as a dictionary.
        Returns an empty dictionary if the file is empty.

    Raises:
        FileNotFoundError: If the file does not exist.
        PermissionError: If the file cannot be read.
        IsADirectoryError: If `path` is a directory.
        yaml.YAMLError: If the file contains invalid YAML.
        TypeError: If the YAML content is valid but not a mapping.
    """
    txt = Path(path).read_text(encoding="utf-8")
    data = yaml.safe_load(txt)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise TypeError(f"Expected a mapping, got {type(data).__name__}")
    return data

def _deep_update(
        base: dict[str, Any],
        override: dict[str, Any]
) -> dict[str, Any]:
    """
    Merge two dictionaries recursively.

    Keys present in 'override' replace those in 'base' unless both values are
    mappings, in which case they are merged recursively. Inputs are not mutated.

    Examples:
        >>> _deep_update({"a": {"x": 1}}, {"a": {"y": 2}, "b": 3})
        {'a': {'x': 1, 'y': 2}, 'b': 3}
        >>> _deep_update({"a": {"x": 1}}, {"a": 7})
        {'a': 7}
    """
    result: dict[str, Any] = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_update(result[k], v)
        else:
            result[k] = v
    return result

def load_and_merge(paths: Sequence[str | Path]) -> dict[str, Any]:
    """
    Load multiple YAML files and deep-merge them.

    Args:
        paths: File paths. Order matters: later paths override earlier.

    Returns:
        A new dictionary with the merged configuration, {} if `paths` is empty.

    Raises:
        FileNotFoundError, PermissionError, IsADirectoryError, yaml.YAMLError,
        TypeError: see :func:`_load_yaml`.
    """
    cfg: dict[str, Any] = {}
    for p in paths:
        cfg = _deep_update(cfg, _load_yaml(p))
    return cfg

def _substitute_placeholders(s: str, vars: dict[str, str]) -> str:
    """
    Substitute placeholders of the form `${var}` in a string by its value.

    Example:
        >>> _substitute_placeholders("data/${exp_name}.joblib", {"exp_name": "blobs"})
        'data/blobs.joblib'
    """
    for key, value in vars.items():
        s = s.replace(f"${{{key}}}", value)
    return s

#########
# Validation
#########

CACHE_MODES = ("off", "write", "read", "auto")
BLOBS_PARAM_KEYS = {"sample_count", "centers", "cluster_spread", "random_seed"}

def _validate_config(cfg: dict[str, Any]) -> None:
    """
    Validate YAML configuration.

    Validates that the YAML config has required sections, types, allowed
    values, and cross-field constraints.

    Raises:
        ValueError: If any section/key is missing or malformed.
    """
    _require_keys(cfg, ["exp_name", "random_seed", "dataset", "data"])

    _validate_exp(cfg["exp_name"])
    _validate_random_seed(cfg["random_seed"])
    _validate_dataset(cfg["dataset"])
    _validate_data(cfg["data"])
    if cfg.get("model") is not None:
        _validate_estimator_spec(cfg["model"], "model")
    if cfg.get("report") is not None:
        _validate_report(cfg["report"])
    if cfg.get("logging") is not None:
        _validate_logging(cfg["logging"])
    _validate_class_names_match(cfg)
    return None

# ----- validation helpers

def _validate_class_names_match(cfg: dict[str, Any]) -> None:
    """
    Cross-check ``report.class_names`` against the number of blob centers.

    Examples:
        >>> _validate_class_names_match({
        ...     "dataset": {"name": "blobs", "params": {"centers": [[0, 0], [1, 1]]}},
        ...     "report": {"class_names": ["a"]}})
        Traceback (most recent call last):
            ...
        ValueError: report.class_names must have 2 entries (one per dataset.params.centers); got 1
    """
    names = (cfg.get("report") or {}).get("class_names")
    dataset = cfg["dataset"]
    if names is None or dataset["name"] != "blobs":
        return None
    n_centers = len(dataset["params"]["centers"])
    if len(names) != n_centers:
        raise ValueError(
            f"report.class_names must have {n_centers} entries (one per dataset.params.centers); "
            f"got {len(names)}"
        )
    return None

def _require_keys(mapping: dict[str, Any], keys: Sequence[str]) -> None:
    """
    Ensure that all required keys are present in a dictionary.

    Examples:
        >>> _require_keys({"a": 1, "b": 2}, ["a", "c"])
        Traceback (most recent call last):
            ...
        ValueError: Missing required config section/key: 'c'
    """
    for key in keys:
        if key not in mapping:
            raise ValueError(f"Missing required config section/key: '{key}'")
    return None

def _ensure_type(value: Any, expected_type: type[Any], context: str) -> None:
    """
    Ensure that a value has the expected type.

    Examples:
        >>> _ensure_type("abc", int, "random_seed")
        Traceback (most recent call last):
            ...
        ValueError: random_seed must be int; got str
    """
    # bool is an int subclass; never accept it where a number is expected
    if isinstance(value, bool) and expected_type is not bool:
        raise ValueError(f"{context} must be {expected_type.__name__}; got bool")
    if not isinstance(value, expected_type):
        raise ValueError(f"{context} must be {expected_type.__name__}; got {type(value).__name__}")
    return None

def _ensure_one_of(value: Any, allowed: Sequence[Any], context: str) -> None:
    """
    Ensure that a value belongs to an allowed set.

    Examples:
        >>> _ensure_one_of("bad", ["off", "auto"], "data.cache.mode")
        Traceback (most recent call last):
            ...
        ValueError: data.cache.mode must be one of ['off', 'auto']; got 'bad'
    """
    if value not in allowed:
        raise ValueError(f"{context} must be one of {list(allowed)}; got {value!r}")
    return None

def _ensure_positive_number(value: Any, context: str) -> None:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ValueError(f"{context} must be a number > 0; got {type(value).__name__}")
    if not float(value) > 0.0:
        raise ValueError(f"{context} must be > 0; got {value!r}")
    return None

def _validate_estimator_spec(spec: dict[str, Any], context: str) -> None:
    """
    Validate an estimator specification mapping.

    Expected shape:
      - ``class`` (str, required): fully qualified dotted path to the class.
      - ``params`` (dict[str, Any] | None, optional): kwargs for the constructor.

    Examples:
        >>> _validate_estimator_spec({"class": 123}, "model")
        Traceback (most recent call last):
            ...
        ValueError: model.class must be str; got int
    """
    _ensure_type(spec, dict, context)
    _require_keys(spec, ["class"])
    _ensure_type(spec["class"], str, f"{context}.class")
    if "." not in spec["class"]:
        raise ValueError(f"{context}.class must be a dotted path; got {spec['class']!r}")

    params = spec.get("params", None)
    if params is not None and not isinstance(params, dict):
        raise ValueError(f"{context}.params must be a mapping or None; got {type(params).__name__}")

    # Guard against typos
    unknown = set(spec.keys()) - {"class", "params"}
    if unknown:
        raise ValueError(f"{context} has unknown keys: {sorted(unknown)}")
    return None

def _validate_centers(centers: Any, context: str) -> None:
    _ensure_type(centers, list, context)
    if not centers:
        raise ValueError(f"{context} must be a non-empty list of coordinate pairs")
    dims = set()
    for i, c in enumerate(centers):
        if not isinstance(c, (list, tuple)) or not c:
            raise ValueError(f"{context}[{i}] must be a non-empty list of numbers; got {c!r}")
        for v in c:
            if isinstance(v, bool) or not isinstance(v, Real):
                raise ValueError(f"{context}[{i}] must contain only numbers; got {c!r}")
        dims.add(len(c))
    if len(dims) != 1:
        raise ValueError(f"{context} entries must all have the same length; got {sorted(dims)}")
    return None

def _validate_dataset(dataset: dict[str, Any]) -> None:
    """
    Validate that a dataset config contains required keys and correct types.

    Expected schema:
      - ``name`` (str, required): Registered dataset identifier.
      - ``params`` (dict, required). For ``blobs``:
          - ``sample_count`` (int > 0, required)
          - ``centers`` (list of equal-length number lists, required)
          - ``cluster_spread`` (number > 0, required)

    Examples:
        >>> _validate_dataset({"name": "blobs", "params": {"sample_count": 0,
        ...     "centers": [[0, 0]], "cluster_spread": 1.0}})
        Traceback (most recent call last):
            ...
        ValueError: dataset.params.sample_count must be > 0; got 0
    """
    _ensure_type(dataset, dict, "dataset")
    _require_keys(dataset, ["name", "params"])
    _ensure_type(dataset["name"], str, "dataset.name")
    if not dataset["name"]:
        raise ValueError("dataset.name must be a non-empty string")
    _ensure_type(dataset["params"], dict, "dataset.params")

    if dataset["name"] == "blobs":
        params = dataset["params"]
        _require_keys(params, ["sample_count", "centers", "cluster_spread"])
        _ensure_type(params["sample_count"], int, "dataset.params.sample_count")
        if params["sample_count"] <= 0:
            raise ValueError(f"dataset.params.sample_count must be > 0; got {params['sample_count']}")
        _validate_centers(params["centers"], "dataset.params.centers")
        _ensure_positive_number(params["cluster_spread"], "dataset.params.cluster_spread")
        if params.get("random_seed") is not None:
            _ensure_type(params["random_seed"], int, "dataset.params.random_seed")

        # Guard against typos
        unknown = set(params.keys()) - BLOBS_PARAM_KEYS
        if unknown:
            raise ValueError(f"dataset.params has unknown keys: {sorted(unknown)}")
    return None

def _validate_data(data: dict[str, Any]) -> None:
    """
    Validate the data splitting/caching configuration block.

    Expected schema:
      - ``test_fraction`` (float in (0, 1), required)
      - ``stratify`` (bool, optional)
      - ``cache`` (dict | None, optional):
          - ``mode`` (str, required): One of {"off", "write", "read", "auto"}.
          - ``path`` (str, required unless mode is "off").

    Examples:
        >>> _validate_data({"test_fraction": 1.5})
        Traceback (most recent call last):
            ...
        ValueError: data.test_fraction must be in (0,1); got 1.5
    """
    _ensure_type(data, dict, "data")

    # --- test_fraction ---
    _require_keys(data, ["test_fraction"])
    test_fraction = data["test_fraction"]
    if isinstance(test_fraction, bool) or not isinstance(test_fraction, (int, float)):
        raise ValueError(
            f"data.test_fraction must be a number in (0,1); got {type(test_fraction).__name__}"
        )
    if not (0.0 < float(test_fraction) < 1.0):
        raise ValueError(f"data.test_fraction must be in (0,1); got {test_fraction!r}")

    # --- stratify ---
    if "stratify" in data and data["stratify"] is not None:
        _ensure_type(data["stratify"], bool, "data.stratify")

    # --- cache ---
    cache = data.get("cache")
    if cache is not None:
        _ensure_type(cache, dict, "data.cache")
        _require_keys(cache, ["mode"])
        # YAML 1.1 reads a bare `off` as False
        mode = "off" if cache["mode"] is False else cache["mode"]
        _ensure_one_of(mode, CACHE_MODES, "data.cache.mode")
        if mode != "off":
            _require_keys(cache, ["path"])
            _ensure_type(cache["path"], str, "data.cache.path")
            if not cache["path"]:
                raise ValueError("data.cache.path must be a non-empty string")
    return None

def _validate_report(report: dict[str, Any]) -> None:
    """
    Validate the report block.

    Expected schema (all optional):
      - ``normalize`` (bool), ``show`` (bool), ``plot_dataset`` (bool)
      - ``output_dir`` (str | None)
      - ``cmap`` (str), ``title`` (str | None)
      - ``class_names`` (list[str] | None)
    """
    _ensure_type(report, dict, "report")
    for key in ("normalize", "show", "plot_dataset"):
        if key in report:
            _ensure_type(report[key], bool, f"report.{key}")
    for key in ("output_dir", "title"):
        if report.get(key) is not None:
            _ensure_type(report[key], str, f"report.{key}")
    if "cmap" in report:
        _ensure_type(report["cmap"], str, "report.cmap")
    names = report.get("class_names")
    if names is not None:
        _ensure_type(names, list, "report.class_names")
        for i, name in enumerate(names):
            _ensure_type(name, str, f"report.class_names[{i}]")
    return None

def _validate_logging(logging_cfg: dict[str, Any]) -> None:
    """Validate the logging block: ``level`` (str) and ``colors`` (mapping)."""
    _ensure_type(logging_cfg, dict, "logging")
    if "level" in logging_cfg:
        _ensure_type(logging_cfg["level"], str, "logging.level")
        _ensure_one_of(
            logging_cfg["level"].upper(),
            ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
            "logging.level",
        )
    if logging_cfg.get("colors") is not None:
        _ensure_type(logging_cfg["colors"], dict, "logging.colors")
    return None

def _validate_exp(exp_name: Any) -> None:
    """
    Validate the experiment name configuration.

    Examples:
        >>> _validate_exp("")
        Traceback (most recent call last):
            ...
        ValueError: exp_name must be a non-empty string
    """
    _ensure_type(exp_name, str, "exp_name")
    if not exp_name:
        raise ValueError("exp_name must be a non-empty string")
    return None

def _validate_random_seed(seed: Any) -> None:
    """
    Validate the random seed: a non-negative int.

    Examples:
        >>> _validate_random_seed(-1)
        Traceback (most recent call last):
            ...
        ValueError: random_seed must be >= 0; got -1
    """
    _ensure_type(seed, int, "random_seed")
    if seed < 0:
        raise ValueError(f"random_seed must be >= 0; got {seed}")
    return None

@dataclass
class PipelineConfig:
    """
    Container for fully resolved pipeline settings.

    Attributes:
        cfg: Full (validated) configuration dictionary.
        exp_name: Experiment name used in paths and titles.
        seed: Seed shared by generation, split and estimator.
        dataset_name: Registered dataset name.
        dataset_params: Keyword arguments for the dataset factory.
        test_fraction: Share of samples held out for evaluation.
        stratify: Whether the split keeps label proportions.
        cache_mode: One of ``off``, ``write``, ``read``, ``auto``.
        cache_path: Cache file, None when the cache is off.
        model_spec: Estimator spec (None selects the linear SVC default).
        normalize: Row-normalize the reported confusion matrix.
        show: Open an interactive window with the plot.
        output_dir: Directory for figures and results, None to skip writing.
        cmap: Colormap for the confusion-matrix plot.
        title: Plot title override.
        class_names: Tick labels override.
        plot_dataset: Also save a scatter plot of the generated data.
    """
    cfg: dict[str, Any]
    exp_name: str
    seed: int
    dataset_name: str
    dataset_params: dict[str, Any]
    test_fraction: float
    stratify: bool
    cache_mode: str
    cache_path: Path | None
    model_spec: dict[str, Any] | None
    normalize: bool
    show: bool
    output_dir: Path | None
    cmap: str
    title: str | None
    class_names: list[str] | None
    plot_dataset: bool

def resolve_config(raw_cfg: dict[str, Any]) -> PipelineConfig:
    """
    Resolve a raw configuration into a structured `PipelineConfig`.

    Steps:
      1) Validate the raw configuration.
      2) Substitute placeholders in paths (`${exp_name}`, `${now}`).
      3) Fill defaults for optional blocks.

    Raises:
        ValueError: For invalid configuration (via validators).
    """
    # 1) Validate
    _validate_config(raw_cfg)
    cfg: dict[str, Any] = dict(raw_cfg)  # shallow copy

    # 2) Paths with placeholders
    now = dt.datetime.now().strftime("%Y%m%d_%H%M%S")
    exp_name: str = cfg["exp_name"]
    vars_map: dict[str, str] = {"exp_name": exp_name, "now": now}

    def subst_path(s: str | None) -> Path | None:
        if not s:
            return None
        return Path(_substitute_placeholders(s, vars_map))

    data = cfg["data"]
    cache = data.get("cache") or {}
    cache_mode = "off" if cache.get("mode", "off") is False else cache.get("mode", "off")
    cache_path = subst_path(cache.get("path")) if cache_mode != "off" else None

    # 3) Report defaults
    report = cfg.get("report") or {}
    output_dir = subst_path(report.get("output_dir", "experiments/${exp_name}"))

    return PipelineConfig(
        cfg=cfg,
        exp_name=exp_name,
        seed=int(cfg["random_seed"]),
        dataset_name=cfg["dataset"]["name"],
        dataset_params=dict(cfg["dataset"]["params"]),
        test_fraction=float(data["test_fraction"]),
        stratify=bool(data.get("stratify") or False),
        cache_mode=cache_mode,
        cache_path=cache_path,
        model_spec=cfg.get("model"),
        normalize=bool(report.get("normalize", True)),
        show=bool(report.get("show", False)),
        output_dir=output_dir,
        cmap=report.get("cmap", "Blues"),
        title=report.get("title"),
        class_names=report.get("class_names"),
        plot_dataset=bool(report.get("plot_dataset", False)),
    )

def load_config(paths: Sequence[str | Path]) -> PipelineConfig:
    """Load, merge and resolve YAML files in one call."""
    return resolve_config(load_and_merge(paths))
