# src/confusionlab/registry.py
from __future__ import annotations
from typing import Any, Callable, TYPE_CHECKING

if TYPE_CHECKING:
    from .datasets.base import DatasetSource

# ---------- Registries ----------
_DATASETS: dict[str, Callable[..., "DatasetSource"]] = {}

# ---------- Dataset API ----------
def register_dataset(name: str):
    """Register a dataset factory (usually a class) under `name`."""
    def deco(factory):
        if name in _DATASETS and _DATASETS[name] is not factory:
            raise ValueError(f"Dataset '{name}' is already registered")
        _DATASETS[name] = factory
        return factory
    return deco

def create_dataset(name: str, **params: Any) -> "DatasetSource":
    """Instantiate the dataset registered under `name` with `params`."""
    if name not in _DATASETS:
        raise KeyError(f"Unknown dataset '{name}'. Available: {sorted(_DATASETS)}")
    return _DATASETS[name](**params)

def available_datasets() -> list[str]:
    return sorted(_DATASETS)
