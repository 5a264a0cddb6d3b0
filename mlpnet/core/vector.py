"""Growable ``float64`` vector with elementwise arithmetic."""

from __future__ import annotations

import math
from numbers import Real
from typing import Callable, Iterable, Iterator, List, Union

import numpy as np

from .errors import InvalidFormat, SizeMismatch
from .serialization import TokenReader, TokenWriter

Array = np.ndarray
Operand = Union["Vector", Array, float, int]


class Vector:
    """Value-type sequence of floats backed by a numpy array.

    Arithmetic between two vectors requires equal lengths and raises
    :class:`SizeMismatch` otherwise; scalar operands are broadcast.
    """

    __slots__ = ("_data",)
    __hash__ = None  # type: ignore[assignment]
    # Mixed ndarray expressions go through our operators, never numpy broadcasting.
    __array_ufunc__ = None

    def __init__(self, values: Iterable[float] = ()) -> None:
        if isinstance(values, Vector):
            self._data = values._data.copy()
        else:
            self._data = np.array(list(values), dtype=np.float64).reshape(-1)

    # ------------------------------------------------------------------
    # Construction helpers

    @classmethod
    def filled(cls, size: int, value: float = 0.0) -> "Vector":
        out = cls()
        out._data = np.full(int(size), float(value), dtype=np.float64)
        return out

    @classmethod
    def zeros(cls, size: int) -> "Vector":
        return cls.filled(size, 0.0)

    @classmethod
    def ones(cls, size: int) -> "Vector":
        return cls.filled(size, 1.0)

    @classmethod
    def from_numpy(cls, array: Array) -> "Vector":
        out = cls()
        out._data = np.asarray(array, dtype=np.float64).reshape(-1).copy()
        return out

    def copy(self) -> "Vector":
        return Vector(self)

    # ------------------------------------------------------------------
    # Sequence protocol

    def __len__(self) -> int:
        return int(self._data.shape[0])

    def __iter__(self) -> Iterator[float]:
        return (float(x) for x in self._data)

    def __getitem__(self, idx):
        if isinstance(idx, slice):
            return Vector.from_numpy(self._data[idx])
        return float(self._data[idx])

    def __setitem__(self, idx: int, value: float) -> None:
        self._data[idx] = value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vector):
            return NotImplemented
        return len(self) == len(other) and bool(np.array_equal(self._data, other._data))

    def __repr__(self) -> str:
        inner = ", ".join(repr(x) for x in self)
        return f"Vector([{inner}])"

    def __str__(self) -> str:
        return "[ " + " ".join(f"{x:g}" for x in self) + " ]"

    @property
    def values(self) -> Array:
        """The backing array; writes through to the vector."""

        return self._data

    def to_numpy(self) -> Array:
        return self._data.copy()

    def to_list(self) -> List[float]:
        return [float(x) for x in self._data]

    def empty(self) -> bool:
        return len(self) == 0

    def resize(self, size: int, fill: float = 0.0) -> None:
        size = int(size)
        if size < 0:
            raise SizeMismatch(f"cannot resize a vector to {size} items")
        current = len(self)
        if size <= current:
            self._data = self._data[:size].copy()
        else:
            tail = np.full(size - current, float(fill), dtype=np.float64)
            self._data = np.concatenate([self._data, tail])

    def append(self, value: float) -> None:
        self._data = np.append(self._data, float(value))

    push_back = append

    # ------------------------------------------------------------------
    # Reductions

    def sum(self) -> float:
        return float(np.sum(self._data))

    def mean(self) -> float:
        if self.empty():
            return 0.0
        return float(np.mean(self._data))

    def euclidean_norm2(self) -> float:
        return float(np.dot(self._data, self._data))

    def euclidean_norm(self) -> float:
        return math.sqrt(self.euclidean_norm2())

    def argmax(self) -> int:
        """Index of the largest item, first occurrence on ties."""

        if self.empty():
            raise SizeMismatch("argmax of an empty vector")
        return int(np.argmax(self._data))

    def dot(self, other: "Vector") -> float:
        self._check_size(other)
        return float(np.dot(self._data, other._data))

    # ------------------------------------------------------------------
    # In-place transforms

    def apply(self, f: Callable[[float], float]) -> "Vector":
        """Replace every item ``x`` with ``f(x)``."""

        if isinstance(f, np.ufunc):
            self._data[:] = f(self._data)
        else:
            self._data[:] = [f(float(x)) for x in self._data]
        return self

    def abs(self) -> "Vector":
        return self.apply(np.abs)

    def log(self) -> "Vector":
        return self.apply(np.log)

    def negate(self) -> "Vector":
        return self.apply(np.negative)

    # ------------------------------------------------------------------
    # Arithmetic

    def _check_size(self, other: "Vector") -> None:
        if len(other) != len(self):
            raise SizeMismatch(f"vector sizes differ: {len(self)} != {len(other)}")

    def _operand(self, other: Operand) -> Array | float:
        if isinstance(other, Vector):
            self._check_size(other)
            return other._data
        if isinstance(other, np.ndarray):
            if other.shape != self._data.shape:
                raise SizeMismatch(
                    f"vector sizes differ: {self._data.shape} != {other.shape}"
                )
            return other.astype(np.float64, copy=False)
        if isinstance(other, Real):
            return float(other)
        return NotImplemented  # type: ignore[return-value]

    def __iadd__(self, other: Operand) -> "Vector":
        rhs = self._operand(other)
        if rhs is NotImplemented:
            return NotImplemented
        self._data += rhs
        return self

    def __isub__(self, other: Operand) -> "Vector":
        rhs = self._operand(other)
        if rhs is NotImplemented:
            return NotImplemented
        self._data -= rhs
        return self

    def __imul__(self, other: Operand) -> "Vector":
        rhs = self._operand(other)
        if rhs is NotImplemented:
            return NotImplemented
        self._data *= rhs
        return self

    def __itruediv__(self, other: Operand) -> "Vector":
        rhs = self._operand(other)
        if rhs is NotImplemented:
            return NotImplemented
        self._data /= rhs
        return self

    def _binary(self, other: Operand, op: Callable[[Array, object], Array]) -> "Vector":
        rhs = self._operand(other)
        if rhs is NotImplemented:
            return NotImplemented
        return Vector.from_numpy(op(self._data, rhs))

    def __add__(self, other: Operand) -> "Vector":
        return self._binary(other, np.add)

    def __sub__(self, other: Operand) -> "Vector":
        return self._binary(other, np.subtract)

    def __mul__(self, other: Operand) -> "Vector":
        return self._binary(other, np.multiply)

    def __truediv__(self, other: Operand) -> "Vector":
        return self._binary(other, np.true_divide)

    def __neg__(self) -> "Vector":
        return self.copy().negate()

    # ------------------------------------------------------------------
    # Text codec

    def encode(self, writer: TokenWriter) -> None:
        writer.write_int(len(self))
        for value in self._data:
            writer.write_float(value)

    @classmethod
    def decode(cls, reader: TokenReader) -> "Vector":
        size = reader.read_int()
        if size < 0:
            raise InvalidFormat(f"negative vector length {size}")
        return cls(reader.read_float() for _ in range(size))


def as_vector(values: Union[Vector, Iterable[float]]) -> Vector:
    """Return ``values`` as a :class:`Vector`, copying plain sequences."""

    if isinstance(values, Vector):
        return values
    return Vector(values)


__all__ = ["Vector", "as_vector"]
