"""mlpnet public API."""

from .core import activations  # noqa: F401
from .core import losses  # noqa: F401
from .core import strategies  # noqa: F401
from .core import types  # noqa: F401
from .core.errors import ErrorKind, InvalidFormat, NetworkError, SizeMismatch, UserCostFunctionMissing
from .core.network import Network
from .core.perceptron import Perceptron
from .core.serialization import LoadResult, try_load
from .core.types import Sample, Topology
from .core.vector import Vector
from .training.pipelines import load_preset, presets, run_pipeline
from .training.trainer import Trainer

__all__ = [
    "ErrorKind",
    "InvalidFormat",
    "LoadResult",
    "Network",
    "NetworkError",
    "Perceptron",
    "Sample",
    "SizeMismatch",
    "Topology",
    "Trainer",
    "UserCostFunctionMissing",
    "Vector",
    "activations",
    "load_preset",
    "losses",
    "presets",
    "run_pipeline",
    "strategies",
    "try_load",
    "types",
]
