"""Cost functions and the per-output error vectors that seed back-propagation."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Callable, Dict, Iterable

from .errors import SizeMismatch
from .vector import Vector, as_vector

CostFn = Callable[[Vector, Vector], float]
ErrorVectorFn = Callable[[Vector, Vector], Vector]

# Smallest positive normal double, substituted for exact zeros before ``log``.
_TINY = sys.float_info.min


def _check_sizes(output: Vector, target: Vector) -> None:
    if len(output) != len(target):
        raise SizeMismatch(
            f"output has {len(output)} items but target has {len(target)}"
        )


def mean_squared_error(output: Iterable[float], target: Iterable[float]) -> float:
    """Return ``0.5 * ||output - target||^2``."""

    output, target = as_vector(output), as_vector(target)
    _check_sizes(output, target)
    return 0.5 * (output - target).euclidean_norm2()


def cross_entropy(output: Iterable[float], target: Iterable[float]) -> float:
    """Return ``-mean(t*log(o) + (1-t)*log(1-o))`` without producing ``-inf``."""

    output, target = as_vector(output), as_vector(target)
    _check_sizes(output, target)
    if output.empty():
        return 0.0

    log_output = output.copy()
    log_output.values[log_output.values == 0.0] = _TINY
    log_output.log()

    log_inv_output = Vector.ones(len(output)) - output
    log_inv_output.values[log_inv_output.values == 0.0] = _TINY
    log_inv_output.log()

    inv_target = Vector.ones(len(target)) - target
    res = target * log_output
    res += inv_target * log_inv_output
    return -res.sum() / len(res)


def mse_error_vector(output: Vector, target: Vector) -> Vector:
    """Sigmoid-aware delta ``(1 - o) * o * (t - o)``."""

    _check_sizes(output, target)
    res = Vector.ones(len(output)) - output
    res *= output
    res *= target - output
    return res


def cross_entropy_error_vector(output: Vector, target: Vector) -> Vector:
    """Delta ``t - o`` used with the cross-entropy cost."""

    _check_sizes(output, target)
    return target - output


@dataclass(frozen=True)
class Loss:
    """A cost paired with the error vector it induces on the output layer."""

    name: str
    cost: CostFn
    error_vector: ErrorVectorFn

    def __call__(self, output: Vector, target: Vector) -> float:
        return self.cost(output, target)


class LossRegistry:
    """Central registry for cost policies."""

    def __init__(self) -> None:
        self._registry: Dict[str, Loss] = {}
        self._aliases: Dict[str, str] = {}

    def register(self, name: str, cost: CostFn, error_vector: ErrorVectorFn) -> None:
        self._registry[name] = Loss(name, cost, error_vector)

    def alias(self, alias: str, name: str) -> None:
        self._aliases[alias] = name

    def get(self, name: str) -> Loss:
        key = self._aliases.get(name, name)
        try:
            return self._registry[key]
        except KeyError:
            available = ", ".join(self.names())
            raise KeyError(f"Unknown loss {name!r}. Available losses: {available}") from None

    def names(self) -> Iterable[str]:
        return sorted(self._registry)

    def __contains__(self, name: object) -> bool:
        return name in self._registry or name in self._aliases


REGISTRY = LossRegistry()
REGISTRY.register("mse", mean_squared_error, mse_error_vector)
REGISTRY.register("cross_entropy", cross_entropy, cross_entropy_error_vector)
REGISTRY.alias("ce", "cross_entropy")
REGISTRY.alias("crossentropy", "cross_entropy")

USERDEF = "userdef"

__all__ = [
    "CostFn",
    "Loss",
    "LossRegistry",
    "REGISTRY",
    "USERDEF",
    "cross_entropy",
    "cross_entropy_error_vector",
    "mean_squared_error",
    "mse_error_vector",
]
