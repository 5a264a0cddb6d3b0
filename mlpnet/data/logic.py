"""Two-input logic gate truth tables."""

from __future__ import annotations

import operator
from typing import Callable, List

from ..core.types import Sample
from ..core.vector import Vector
from .registry import DatasetSpec, register_dataset

ROWS = ((0, 0), (0, 1), (1, 0), (1, 1))


def truth_table(gate: Callable[[int, int], int]) -> List[Sample]:
    """Return one sample per input row, in ``ROWS`` order."""

    return [Sample(Vector([a, b]), Vector([gate(a, b)])) for a, b in ROWS]


def _gate_dataset(name: str, gate: Callable[[int, int], int]) -> None:
    def factory(**_: object) -> DatasetSpec:
        return DatasetSpec(
            name=name,
            samples=truth_table(gate),
            provenance={"source": "builtin", "kind": "logic_gate", "gate": name},
        )

    register_dataset(name, factory)


_gate_dataset("xor", operator.xor)
_gate_dataset("and", operator.and_)
_gate_dataset("or", operator.or_)
_gate_dataset("nand", lambda a, b: 1 - (a & b))


__all__ = ["ROWS", "truth_table"]
