"""Core numerical primitives for mlpnet."""

from . import activations, errors, losses, serialization, strategies, types, vector
from .errors import InvalidFormat, NetworkError, SizeMismatch, UserCostFunctionMissing
from .network import Network
from .perceptron import Perceptron
from .types import Neuron, Sample, Topology
from .vector import Vector

__all__ = [
    "InvalidFormat",
    "Network",
    "NetworkError",
    "Neuron",
    "Perceptron",
    "Sample",
    "SizeMismatch",
    "Topology",
    "UserCostFunctionMissing",
    "Vector",
    "activations",
    "errors",
    "losses",
    "serialization",
    "strategies",
    "types",
    "vector",
]
