"""Cost functions with the ``(model, target) -> float`` shape the trainer expects."""

from __future__ import annotations

from typing import Any, Dict, Iterable

from ..core.network import Network
from ..core.perceptron import Perceptron
from .trainer import CostFunction


def network_mse(network: Network, target: Iterable[float]) -> float:
    return network.mean_squared_error(target)


def network_cross_entropy(network: Network, target: Iterable[float]) -> float:
    return network.cross_entropy(target)


def network_error_cost(network: Network, target: Iterable[float]) -> float:
    """Cost chosen on the network itself, including a user supplied one."""

    return network.calc_error_cost(target)


def perceptron_error(perceptron: Perceptron, target: Any) -> float:
    return perceptron.error(target)


COSTS: Dict[str, CostFunction] = {
    "mse": network_mse,
    "cross_entropy": network_cross_entropy,
    "ce": network_cross_entropy,
    "network": network_error_cost,
    "perceptron": perceptron_error,
}


def get_cost(name: str) -> CostFunction:
    try:
        return COSTS[name]
    except KeyError:
        available = ", ".join(sorted(COSTS))
        raise KeyError(f"Unknown cost {name!r}. Available costs: {available}") from None


__all__ = [
    "COSTS",
    "get_cost",
    "network_cross_entropy",
    "network_error_cost",
    "network_mse",
    "perceptron_error",
]
