"""Multilayer perceptron trained by back-propagation with momentum.

The network is built from a :class:`~mlpnet.core.types.Topology`: one layer of
sigmoid neurons per topology entry after the first, each neuron fully connected
to the previous layer (or to the input vector for the first hidden layer).

Training one sample is::

    net.set_input(inputs)
    net.back_propagate(target)   # feed-forward, error signals, weight update

The weight update itself is delegated to an :class:`UpdateRule` chosen at
construction, so the plain and the recurrent variants are two configurations
of this one class.
"""

from __future__ import annotations

import copy
import io
import logging
import math
from typing import Callable, Iterable, List, Optional, Sequence, TextIO, Union

import numpy as np

from . import losses
from .activations import sigmoid, sigmoid_derivative
from .errors import InvalidFormat, SizeMismatch, UserCostFunctionMissing
from .serialization import TokenReader, TokenWriter
from .strategies import UPDATE_RULES, UpdateRule, resolve_update_rule
from .types import Array, Neuron, Topology
from .vector import Vector, as_vector

logger = logging.getLogger(__name__)

NeuronLayer = List[Neuron]
UserCostFn = Callable[[Vector, Vector], float]

ID_INPUTS = "inputs"
ID_TOPOLOGY = "topology"
ID_NEURON_LAYER = "layer"
ID_NEURON = "neuron"


class Network:
    """Topology-driven MLP with sigmoid activations."""

    def __init__(
        self,
        topology: Optional[Union[Topology, Sequence[int]]] = None,
        learning_rate: float = 0.1,
        momentum: float = 0.5,
        *,
        update_rule: Union[str, UpdateRule, None] = None,
        cost: str = "mse",
        rng: Optional[np.random.Generator] = None,
        seed: Optional[int] = None,
    ) -> None:
        self._learning_rate = float(learning_rate)
        self._momentum = float(momentum)
        self._rng = rng if rng is not None else np.random.default_rng(seed)
        self._cost_name = "mse"
        self._user_cost: Optional[UserCostFn] = None
        self.select_cost_function(cost)

        self._topology: Optional[Topology] = None
        self._input = Vector()
        self._layers: List[NeuronLayer] = []
        self._update_rule: Optional[UpdateRule] = None

        if update_rule is not None:
            self._update_rule = resolve_update_rule(update_rule)

        if topology is not None:
            if not isinstance(topology, Topology):
                topology = Topology(topology)
            if self._update_rule is None:
                self._update_rule = resolve_update_rule(None)
            self._topology = topology
            self._input, self._layers = self._build(topology)
            self.reshuffle_weights()
            logger.debug(
                "built %s network %s (lr=%s, momentum=%s)",
                self._update_rule.net_id,
                topology.to_list(),
                self._learning_rate,
                self._momentum,
            )

    # ------------------------------------------------------------------
    # Accessors

    @property
    def topology(self) -> Optional[Topology]:
        return self._topology

    @property
    def input_size(self) -> int:
        return len(self._input)

    @property
    def output_size(self) -> int:
        if self._topology is None:
            return 0
        return self._topology.output_size

    @property
    def learning_rate(self) -> float:
        return self._learning_rate

    @learning_rate.setter
    def learning_rate(self, rate: float) -> None:
        self._learning_rate = float(rate)

    @property
    def momentum(self) -> float:
        return self._momentum

    @momentum.setter
    def momentum(self, value: float) -> None:
        self._momentum = float(value)

    @property
    def update_rule(self) -> Optional[UpdateRule]:
        return self._update_rule

    @property
    def net_id(self) -> str:
        return (self._update_rule or resolve_update_rule(None)).net_id

    @property
    def input_vector(self) -> Vector:
        return self._input.copy()

    @property
    def layers(self) -> Sequence[NeuronLayer]:
        return self._layers

    @property
    def rng(self) -> np.random.Generator:
        return self._rng

    def __repr__(self) -> str:
        shape = self._topology.to_list() if self._topology is not None else None
        return (
            f"Network(topology={shape}, learning_rate={self._learning_rate}, "
            f"momentum={self._momentum}, net_id={self.net_id!r})"
        )

    # ------------------------------------------------------------------
    # Cost policy

    @property
    def cost_name(self) -> str:
        return self._cost_name

    def select_cost_function(self, name: str) -> None:
        """Select ``"mse"``, ``"cross_entropy"`` or ``"userdef"``."""

        if name == losses.USERDEF:
            self._cost_name = name
            return
        self._cost_name = losses.REGISTRY.get(name).name

    def set_cost_function(self, fn: Optional[UserCostFn]) -> None:
        """Install a user-defined ``(output, target) -> float`` cost."""

        self._user_cost = fn
        self._cost_name = losses.USERDEF

    def _error_vector(self, output: Vector, target: Vector) -> Vector:
        if self._cost_name == "cross_entropy":
            return losses.cross_entropy_error_vector(output, target)
        return losses.mse_error_vector(output, target)

    def calc_error_cost(self, target: Iterable[float]) -> float:
        """Evaluate the selected cost against the current outputs."""

        target = self._checked_target(target)
        output = self.copy_output()
        if self._cost_name == losses.USERDEF:
            if self._user_cost is None:
                raise UserCostFunctionMissing(
                    "user-defined cost selected but no cost function was set"
                )
            return float(self._user_cost(output, target))
        return losses.REGISTRY.get(self._cost_name)(output, target)

    def mean_squared_error(self, target: Iterable[float]) -> float:
        target = self._checked_target(target)
        return losses.mean_squared_error(self.copy_output(), target)

    def cross_entropy(self, target: Iterable[float]) -> float:
        target = self._checked_target(target)
        return losses.cross_entropy(self.copy_output(), target)

    def _checked_target(self, target: Iterable[float]) -> Vector:
        target = as_vector(target)
        if len(target) != self.output_size:
            raise SizeMismatch(
                f"target has {len(target)} items, network outputs {self.output_size}"
            )
        return target

    # ------------------------------------------------------------------
    # Construction

    @staticmethod
    def _build(topology: Topology) -> tuple[Vector, List[NeuronLayer]]:
        inputs = Vector.zeros(topology.input_size)
        layers: List[NeuronLayer] = []
        for prev_size, size in zip(topology[:-1], topology[1:]):
            layers.append([Neuron.sized(prev_size) for _ in range(size)])
        return inputs, layers

    def reshuffle_weights(self) -> None:
        """Draw fresh weights in ``[-1, 1] / sqrt(total weight count)``."""

        weight_count = sum(len(n.weights) for layer in self._layers for n in layer)
        scale = math.sqrt(weight_count)
        for layer in self._layers:
            for neuron in layer:
                size = len(neuron.weights)
                neuron.weights.values[:] = (-1.0 + 2.0 * self._rng.random(size)) / scale
                neuron.delta_weights.values[:] = 0.0
                neuron.delta_weights_tm1.values[:] = 0.0
                neuron.bias = float(self._rng.random())

    def copy(self) -> "Network":
        """Deep value copy, including the random generator state."""

        return copy.deepcopy(self)

    # ------------------------------------------------------------------
    # Forward pass

    def set_input(self, inputs: Iterable[float]) -> None:
        inputs = as_vector(inputs)
        if len(inputs) != len(self._input):
            raise SizeMismatch(
                f"input has {len(inputs)} items, network expects {len(self._input)}"
            )
        self._input = inputs.copy()

    def _activations(self, layer_idx: int) -> Array:
        """Outputs feeding layer ``layer_idx`` (0 is the raw input)."""

        if layer_idx < 1:
            return self._input.values
        return np.fromiter(
            (n.output for n in self._layers[layer_idx - 1]),
            dtype=np.float64,
            count=len(self._layers[layer_idx - 1]),
        )

    def feed_forward(self) -> None:
        for layer_idx, layer in enumerate(self._layers):
            source = self._activations(layer_idx)
            for neuron in layer:
                total = float(np.dot(neuron.weights.values, source)) + neuron.bias
                neuron.output = sigmoid(total)

    def copy_output(self) -> Vector:
        if not self._layers:
            return Vector()
        return Vector(n.output for n in self._layers[-1])

    # ------------------------------------------------------------------
    # Back-propagation

    def back_propagate(self, target: Iterable[float]) -> Vector:
        """Run a forward pass, then update every neuron towards ``target``.

        Returns the outputs computed by the forward pass.
        """

        target = self._checked_target(target)
        rule = self._update_rule
        if rule is None or not self._layers:
            raise ValueError("network was neither built nor loaded")

        self.feed_forward()
        output = self.copy_output()

        errors = self._error_vector(output, target)
        for neuron, error in zip(self._layers[-1], errors):
            neuron.error = error

        layer_idx = len(self._layers)
        source = self._activations(layer_idx - 1)
        for neuron in self._layers[layer_idx - 1]:
            rule.update(neuron, source, self._learning_rate, self._momentum)

        # Hidden layers, innermost first. Each error is
        # output * (1 - output) * sum(next.error * next.weights[idx]).
        while layer_idx > 1:
            layer_idx -= 1
            hidden = self._layers[layer_idx - 1]
            next_layer = self._layers[layer_idx]
            last = next_layer[-1]
            source = self._activations(layer_idx - 1)

            for idx, neuron in enumerate(hidden):
                total = 0.0
                for next_neuron in next_layer:
                    total += next_neuron.error * next_neuron.weights.values[idx]
                total += last.error * last.bias
                neuron.error = sigmoid_derivative(neuron.output) * float(total)
                rule.update(neuron, source, self._learning_rate, self._momentum)

        return output

    # ------------------------------------------------------------------
    # Persistence

    def save(self, stream: TextIO) -> TextIO:
        """Write the network state to a text ``stream``."""

        if self._topology is None:
            raise ValueError("cannot save a network that was neither built nor loaded")
        rule = self._update_rule or resolve_update_rule(None)
        writer = TokenWriter(stream)
        writer.tag(rule.net_id)
        writer.write_float(self._learning_rate)
        writer.write_float(self._momentum)
        writer.tag(ID_INPUTS)
        self._input.encode(writer)
        writer.blank()
        writer.tag(ID_TOPOLOGY)
        self._topology.encode(writer)
        writer.blank()
        for layer in self._layers:
            writer.tag(ID_NEURON_LAYER)
            for neuron in layer:
                writer.tag(ID_NEURON)
                neuron.encode(writer, rule.extra_state)
                writer.blank()
        return stream

    def dumps(self) -> str:
        return self.save(io.StringIO()).getvalue()

    def _rule_for_tag(self, tag: str) -> UpdateRule:
        if self._update_rule is not None:
            if tag != self._update_rule.net_id:
                raise InvalidFormat(
                    f"expected network tag {self._update_rule.net_id!r}, found {tag!r}"
                )
            return self._update_rule
        if tag in UPDATE_RULES:
            rule = resolve_update_rule(tag)
            if rule.net_id == tag:
                return rule
        raise InvalidFormat(f"unknown network tag {tag!r}")

    def load(self, stream: TextIO) -> "Network":
        """Replace the network state with the one read from ``stream``.

        The stream is parsed completely before any field is assigned, so an
        :class:`InvalidFormat` error leaves the network unchanged.
        """

        reader = TokenReader(stream)
        rule = self._rule_for_tag(reader.next_token())
        learning_rate = reader.read_float()
        momentum = reader.read_float()

        reader.expect(ID_INPUTS)
        inputs = Vector.decode(reader)

        reader.expect(ID_TOPOLOGY)
        topology = Topology.decode(reader)
        if len(inputs) != topology.input_size:
            raise InvalidFormat(
                f"input vector has {len(inputs)} items, topology expects {topology.input_size}"
            )

        layers: List[NeuronLayer] = []
        for prev_size, size in zip(topology[:-1], topology[1:]):
            reader.expect(ID_NEURON_LAYER)
            layer: NeuronLayer = []
            for _ in range(size):
                reader.expect(ID_NEURON)
                layer.append(Neuron.decode(reader, prev_size, rule.extra_state))
            layers.append(layer)

        self._update_rule = rule
        self._learning_rate = learning_rate
        self._momentum = momentum
        self._input = inputs
        self._topology = topology
        self._layers = layers
        logger.debug("loaded %s network %s", rule.net_id, topology.to_list())
        return self

    @classmethod
    def from_stream(cls, stream: TextIO, **kwargs) -> "Network":
        return cls(**kwargs).load(stream)

    @classmethod
    def loads(cls, text: str, **kwargs) -> "Network":
        return cls.from_stream(io.StringIO(text), **kwargs)

    # ------------------------------------------------------------------
    # Introspection

    def to_dict(self) -> dict:
        """JSON-ready view of the network state."""

        layers = {}
        for layer_idx, layer in enumerate(self._layers):
            layers[f"{ID_NEURON_LAYER}{layer_idx}"] = {
                f"{ID_NEURON}{idx}": neuron.to_dict() for idx, neuron in enumerate(layer)
            }
        return {
            self.net_id: {
                "learningRate": self._learning_rate,
                "momentum": self._momentum,
                ID_INPUTS: self._input.to_list(),
                ID_TOPOLOGY: self._topology.to_list() if self._topology else [],
                "layers": layers,
            }
        }

    def dump(self, stream: Optional[TextIO] = None) -> str:
        """Human readable dump of inputs, weights, biases, outputs and errors."""

        lines = ["Net Inputs"]
        lines.extend(f"\t[{idx}] = {value:g}" for idx, value in enumerate(self._input))
        output_layer = len(self._layers) - 1
        for layer_idx, layer in enumerate(self._layers):
            kind = "Output" if layer_idx == output_layer else "Hidden"
            lines.append("")
            lines.append(f"Neuron layer {layer_idx} {kind}")
            source = self._activations(layer_idx)
            for neuron_idx, neuron in enumerate(layer):
                lines.append(f"\tNeuron {neuron_idx}")
                for in_idx, weight in enumerate(neuron.weights):
                    lines.append(f"\t\tInput  [{in_idx}] = {source[in_idx]:g}")
                    lines.append(f"\t\tWeight [{in_idx}] = {weight:g}")
                lines.append(f"\t\tBias =       {neuron.bias:g}")
                lines.append(f"\t\tOutput = {neuron.output:g}")
                lines.append(f"\t\tError = {neuron.error:g}")
        text = "\n".join(lines) + "\n"
        if stream is not None:
            stream.write(text)
        return text


__all__ = ["Network", "NeuronLayer"]
