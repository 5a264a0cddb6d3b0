"""Core data contracts: topology, neuron state and training samples."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, NamedTuple, Sequence, Tuple

import numpy as np

from .errors import InvalidFormat, SizeMismatch
from .serialization import TokenReader, TokenWriter
from .vector import Vector

Array = np.ndarray


@dataclass(frozen=True)
class Topology:
    """Layer widths from input to output.

    ``sizes[0]`` is the input width, ``sizes[-1]`` the output width and the
    items in between are hidden-layer widths.  At least three positive
    entries are required.
    """

    sizes: Tuple[int, ...]

    def __init__(self, sizes: Sequence[int]) -> None:
        try:
            raw = list(sizes)
            values = tuple(int(s) for s in raw)
            integral = all(int(s) == s for s in raw)
        except (TypeError, ValueError) as exc:
            raise SizeMismatch(f"topology must be a sequence of integers: {sizes!r}") from exc
        if not integral:
            raise SizeMismatch(f"topology must be a sequence of integers: {raw!r}")
        if len(values) < 3:
            raise SizeMismatch(f"topology needs at least 3 layers, got {len(values)}")
        if any(s < 1 for s in values):
            raise SizeMismatch(f"topology layer sizes must be positive: {list(values)}")
        object.__setattr__(self, "sizes", values)

    def __len__(self) -> int:
        return len(self.sizes)

    def __iter__(self) -> Iterator[int]:
        return iter(self.sizes)

    def __getitem__(self, idx: int) -> int:
        return self.sizes[idx]

    def __repr__(self) -> str:
        return f"Topology({list(self.sizes)})"

    @property
    def input_size(self) -> int:
        return self.sizes[0]

    @property
    def output_size(self) -> int:
        return self.sizes[-1]

    @property
    def hidden(self) -> Tuple[int, ...]:
        return self.sizes[1:-1]

    def weight_count(self) -> int:
        """Total number of connection weights in a network of this shape."""

        return sum(a * b for a, b in zip(self.sizes[:-1], self.sizes[1:]))

    def to_list(self) -> list[int]:
        return list(self.sizes)

    def encode(self, writer: TokenWriter) -> None:
        writer.write_int(len(self.sizes))
        for size in self.sizes:
            writer.write_int(size)

    @classmethod
    def decode(cls, reader: TokenReader) -> "Topology":
        count = reader.read_int()
        if count < 0:
            raise InvalidFormat(f"negative topology length {count}")
        sizes = [reader.read_int() for _ in range(count)]
        try:
            return cls(sizes)
        except SizeMismatch as exc:
            raise InvalidFormat(f"invalid topology in stream: {exc}") from exc


@dataclass
class Neuron:
    """Trainable state of one unit."""

    weights: Vector = field(default_factory=Vector)
    delta_weights: Vector = field(default_factory=Vector)
    delta_weights_tm1: Vector = field(default_factory=Vector)
    bias: float = 0.0
    output: float = 0.0
    error: float = 0.0

    @classmethod
    def sized(cls, size: int) -> "Neuron":
        neuron = cls()
        neuron.resize(size)
        return neuron

    def resize(self, size: int) -> None:
        self.weights.resize(size)
        self.delta_weights.resize(size)
        self.delta_weights_tm1.resize(size)

    def copy(self) -> "Neuron":
        return Neuron(
            weights=self.weights.copy(),
            delta_weights=self.delta_weights.copy(),
            delta_weights_tm1=self.delta_weights_tm1.copy(),
            bias=self.bias,
            output=self.output,
            error=self.error,
        )

    def encode(self, writer: TokenWriter, extra_state: Sequence[str] = ()) -> None:
        writer.write_float(self.bias)
        self.weights.encode(writer)
        self.delta_weights.encode(writer)
        for name in extra_state:
            getattr(self, name).encode(writer)

    @classmethod
    def decode(
        cls, reader: TokenReader, size: int, extra_state: Sequence[str] = ()
    ) -> "Neuron":
        neuron = cls.sized(size)
        neuron.bias = reader.read_float()
        neuron.weights = _sized_vector(reader, size, "weights")
        neuron.delta_weights = _sized_vector(reader, size, "delta weights")
        for name in extra_state:
            setattr(neuron, name, _sized_vector(reader, size, name))
        return neuron

    def to_dict(self) -> dict:
        return {
            "bias": self.bias,
            "weights": self.weights.to_list(),
            "deltaW": self.delta_weights.to_list(),
        }


def _sized_vector(reader: TokenReader, size: int, what: str) -> Vector:
    vector = Vector.decode(reader)
    if len(vector) != size:
        raise InvalidFormat(f"neuron {what} has {len(vector)} items, expected {size}")
    return vector


class Sample(NamedTuple):
    """A single ``(inputs, target)`` training pair."""

    inputs: Vector
    target: Vector


__all__ = ["Array", "Neuron", "Sample", "Topology"]
