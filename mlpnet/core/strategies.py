"""Weight update rules injected into :class:`mlpnet.core.network.Network`."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Protocol, Tuple, Type, Union

from .types import Array, Neuron


class UpdateRule(Protocol):
    """Protocol implemented by per-neuron weight update rules."""

    net_id: str
    extra_state: Tuple[str, ...]

    def update(
        self,
        neuron: Neuron,
        source: Array,
        learning_rate: float,
        momentum: float,
    ) -> None:
        """Update ``neuron`` in place from its current ``error``.

        ``source`` holds the activations feeding the neuron: the raw input
        vector for the first layer, the previous layer outputs otherwise.
        """


@dataclass(frozen=True)
class MomentumUpdate:
    """Back-propagation with momentum on the previous weight delta."""

    net_id: str = "ann"
    extra_state: Tuple[str, ...] = ()

    def update(
        self,
        neuron: Neuron,
        source: Array,
        learning_rate: float,
        momentum: float,
    ) -> None:
        lr_err = neuron.error * learning_rate
        m_err = neuron.error * momentum

        delta = neuron.delta_weights.values
        delta[:] = source * lr_err + m_err * delta
        neuron.weights.values[:] += delta

        # The bias is replaced rather than accumulated.
        neuron.bias = lr_err + m_err * neuron.bias


@dataclass(frozen=True)
class RecurrentMomentumUpdate:
    """Momentum update that also replays the delta from two steps back."""

    net_id: str = "rmlp"
    extra_state: Tuple[str, ...] = ("delta_weights_tm1",)

    def update(
        self,
        neuron: Neuron,
        source: Array,
        learning_rate: float,
        momentum: float,
    ) -> None:
        lr_err = neuron.error * learning_rate
        m_err = neuron.error * momentum

        delta = neuron.delta_weights.values
        delta_tm1 = neuron.delta_weights_tm1.values
        replay = delta_tm1.copy()

        delta_tm1[:] = delta
        delta[:] = source * lr_err + m_err * delta_tm1

        weights = neuron.weights.values
        weights += replay
        weights += delta

        neuron.bias = lr_err + m_err * neuron.bias


UPDATE_RULES: Dict[str, Type] = {
    "ann": MomentumUpdate,
    "mlp": MomentumUpdate,
    "rmlp": RecurrentMomentumUpdate,
    "recurrent": RecurrentMomentumUpdate,
}


def resolve_update_rule(rule: Union[str, UpdateRule, None]) -> UpdateRule:
    """Return an update rule instance for a name, an instance or ``None``."""

    if rule is None:
        return MomentumUpdate()
    if isinstance(rule, str):
        try:
            return UPDATE_RULES[rule]()
        except KeyError:
            available = ", ".join(sorted(UPDATE_RULES))
            raise KeyError(f"Unknown update rule {rule!r}. Available: {available}") from None
    return rule


__all__ = [
    "MomentumUpdate",
    "RecurrentMomentumUpdate",
    "UPDATE_RULES",
    "UpdateRule",
    "resolve_update_rule",
]
