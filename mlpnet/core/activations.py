"""Activation utilities for mlpnet."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Union

import numpy as np

from .types import Array

Scalar = Union[float, Array]


def sigmoid(x: Scalar) -> Scalar:
    """Return the logistic function ``1 / (1 + e^-x)``."""

    if isinstance(x, np.ndarray):
        with np.errstate(over="ignore"):
            return 1.0 / (1.0 + np.exp(-x))
    try:
        return 1.0 / (1.0 + math.exp(-x))
    except OverflowError:
        return 0.0


def sigmoid_derivative(output: Scalar) -> Scalar:
    """Derivative of the sigmoid expressed through its output."""

    return output * (1.0 - output)


@dataclass(frozen=True)
class StepFunction:
    """Threshold function used to sharpen a continuous output."""

    threshold: float = 0.0
    low: float = 0.0
    high: float = 1.0

    def __call__(self, x: float) -> float:
        return self.high if x > self.threshold else self.low
