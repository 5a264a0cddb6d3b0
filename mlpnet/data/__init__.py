"""Datasets for mlpnet experiments."""

from . import logic  # noqa: F401  registers the built-in gates
from .registry import DatasetSpec, available_datasets, get_dataset, register_dataset

__all__ = ["DatasetSpec", "available_datasets", "get_dataset", "logic", "register_dataset"]
