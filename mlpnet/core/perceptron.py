"""Single sigmoid neuron trained with the delta rule."""

from __future__ import annotations

import io
import logging
import math
from typing import Iterable, Optional, TextIO, Union

import numpy as np

from .activations import StepFunction, sigmoid
from .errors import InvalidFormat, SizeMismatch
from .serialization import TokenReader, TokenWriter
from .types import Neuron
from .vector import Vector, as_vector

logger = logging.getLogger(__name__)

ID_PERCEPTRON = "perceptron"
ID_INPUTS = "inputs"
ID_NEURON = "neuron"

Target = Union[float, Iterable[float]]


def _scalar(target: Target) -> float:
    """Accept a bare number or a one-item vector as the expected output."""

    if isinstance(target, (int, float)):
        return float(target)
    values = as_vector(target)
    if len(values) != 1:
        raise SizeMismatch(f"perceptron target must have one item, got {len(values)}")
    return values[0]


class Perceptron:
    """One neuron, ``input_size`` inputs and a step function for sharp output."""

    def __init__(
        self,
        input_size: int = 0,
        learning_rate: float = 0.1,
        step: StepFunction | None = None,
        *,
        rng: Optional[np.random.Generator] = None,
        seed: Optional[int] = None,
    ) -> None:
        self._learning_rate = float(learning_rate)
        self._step = step or StepFunction()
        self._rng = rng if rng is not None else np.random.default_rng(seed)
        self._input = Vector()
        self._neuron = Neuron()
        if input_size:
            if input_size < 1:
                raise SizeMismatch(f"perceptron needs at least one input, got {input_size}")
            self._input = Vector.zeros(input_size)
            self._neuron = Neuron.sized(input_size)
            self.reshuffle_weights()

    @property
    def input_size(self) -> int:
        return len(self._input)

    @property
    def learning_rate(self) -> float:
        return self._learning_rate

    @learning_rate.setter
    def learning_rate(self, rate: float) -> None:
        self._learning_rate = float(rate)

    @property
    def input_vector(self) -> Vector:
        return self._input.copy()

    @property
    def neuron(self) -> Neuron:
        return self._neuron

    @property
    def output(self) -> float:
        return self._neuron.output

    @property
    def sharp_output(self) -> float:
        return self._step(self._neuron.output)

    def set_input(self, inputs: Iterable[float]) -> None:
        inputs = as_vector(inputs)
        if len(inputs) != len(self._input):
            raise SizeMismatch(
                f"input has {len(inputs)} items, perceptron expects {len(self._input)}"
            )
        self._input = inputs.copy()

    def reshuffle_weights(self) -> None:
        size = len(self._neuron.weights)
        scale = math.sqrt(size)
        self._neuron.weights.values[:] = (-1.0 + 2.0 * self._rng.random(size)) / scale
        self._neuron.delta_weights.values[:] = 0.0
        self._neuron.bias = float(self._rng.random())

    def feed_forward(self) -> None:
        total = float(np.dot(self._input.values, self._neuron.weights.values))
        self._neuron.output = sigmoid(total + self._neuron.bias)

    def back_propagate(self, target: Target) -> float:
        """Fire the neuron, then move weights and bias towards ``target``."""

        target = _scalar(target)
        if self._input.empty():
            raise ValueError("perceptron was neither built nor loaded")
        self.feed_forward()
        output = self._neuron.output
        self._neuron.error = target - output
        step = self._learning_rate * (target - output)
        self._neuron.weights.values[:] += step * self._input.values
        self._neuron.bias += step
        return output

    def error(self, target: Target) -> float:
        return abs(_scalar(target) - self._neuron.output)

    # ------------------------------------------------------------------
    # Persistence

    def save(self, stream: TextIO) -> TextIO:
        writer = TokenWriter(stream)
        writer.tag(ID_PERCEPTRON)
        writer.write_float(self._learning_rate)
        writer.tag(ID_INPUTS)
        self._input.encode(writer)
        writer.blank()
        writer.tag(ID_NEURON)
        self._neuron.encode(writer)
        return stream

    def dumps(self) -> str:
        return self.save(io.StringIO()).getvalue()

    def load(self, stream: TextIO) -> "Perceptron":
        reader = TokenReader(stream)
        reader.expect(ID_PERCEPTRON)
        learning_rate = reader.read_float()
        reader.expect(ID_INPUTS)
        inputs = Vector.decode(reader)
        if inputs.empty():
            raise InvalidFormat("perceptron stream has an empty input vector")
        reader.expect(ID_NEURON)
        neuron = Neuron.decode(reader, len(inputs))

        self._learning_rate = learning_rate
        self._input = inputs
        self._neuron = neuron
        logger.debug("loaded perceptron with %d inputs", len(inputs))
        return self

    @classmethod
    def loads(cls, text: str, **kwargs) -> "Perceptron":
        return cls(**kwargs).load(io.StringIO(text))

    def dump(self, stream: Optional[TextIO] = None) -> str:
        lines = ["Perceptron"]
        for idx, weight in enumerate(self._neuron.weights):
            lines.append(f"\tInput [{idx}] = {self._input[idx]:g}, Weight [{idx}] = {weight:g}")
        lines.append(f"\tBias = {self._neuron.bias:g}")
        lines.append(f"\tOutput = {self._neuron.output:g}")
        lines.append(f"\tError = {self._neuron.error:g}")
        text = "\n".join(lines) + "\n"
        if stream is not None:
            stream.write(text)
        return text


__all__ = ["Perceptron"]
