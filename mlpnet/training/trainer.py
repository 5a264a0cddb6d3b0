"""Sample-by-sample training loop shared by networks and perceptrons."""

from __future__ import annotations

import logging
from typing import (
    Any,
    Callable,
    Iterable,
    Iterator,
    Mapping,
    Protocol,
    Sequence,
    Tuple,
    Union,
)

from ..core.vector import Vector, as_vector

logger = logging.getLogger(__name__)


class Trainable(Protocol):
    def set_input(self, inputs: Iterable[float]) -> None: ...

    def back_propagate(self, target: Any) -> Any: ...


CostFunction = Callable[[Any, Vector], float]
ProgressCallback = Callable[[Any, Vector, Vector, int, int, float], bool]
TrainingSet = Union[Sequence[Tuple[Iterable[float], Iterable[float]]], Mapping[Any, Any]]


class Trainer:
    """Present a training set to a model until it converges or runs out of epochs.

    ``min_error`` below zero disables early stopping. ``callbacks`` follow the
    metrics sink interface: any object with ``on_epoch(epoch, metrics)``
    receives ``{"error": last_error}`` after every completed epoch.
    """

    def __init__(
        self,
        network: Trainable,
        epochs: int,
        min_error: float = -1.0,
        callbacks: Sequence[object] | None = None,
    ) -> None:
        if epochs < 0:
            raise ValueError(f"epochs must be non-negative, got {epochs}")
        self.network = network
        self._epochs = int(epochs)
        self._min_error = float(min_error)
        self._error = 0.0
        self.callbacks = list(callbacks or [])

    @property
    def epochs(self) -> int:
        return self._epochs

    @property
    def min_error(self) -> float:
        return self._min_error

    @property
    def error(self) -> float:
        """Cost measured after the most recent training step."""

        return self._error

    def __iter__(self) -> Iterator[int]:
        return iter(range(self._epochs))

    def train(self, inputs: Iterable[float], target: Iterable[float], cost: CostFunction) -> bool:
        """Run one back-propagation step and report whether the error is low enough."""

        self.network.set_input(inputs)
        self.network.back_propagate(target)
        self._error = float(cost(self.network, target))
        return self._error < self._min_error

    def run_training(
        self,
        training_set: TrainingSet,
        cost: CostFunction,
        progress: ProgressCallback | None = None,
        fraction: float = 1.0,
    ) -> int:
        """Train over ``training_set`` and return the epoch reached.

        ``progress`` is called before each sample with
        ``(network, inputs, target, epoch, index, last_error)``; a truthy
        return stops training before that sample is used.
        """

        samples = _as_samples(training_set)
        limit = len(samples)
        if fraction < 1.0:
            limit = int(max(0.0, fraction) * len(samples))

        for epoch in self:
            for index, (inputs, target) in enumerate(samples[:limit]):
                if progress is not None and progress(
                    self.network, inputs, target, epoch, index, self._error
                ):
                    logger.info("training stopped by callback at epoch %d sample %d", epoch, index)
                    return epoch
                if self.train(inputs, target, cost):
                    logger.info("converged at epoch %d with error %g", epoch, self._error)
                    self._emit_epoch(epoch)
                    return epoch
            self._emit_epoch(epoch)
        logger.debug("epoch budget of %d exhausted, last error %g", self._epochs, self._error)
        return self._epochs

    # ------------------------------------------------------------------
    # Internal helpers

    def _emit_epoch(self, epoch: int) -> None:
        metrics = {"error": self._error}
        for callback in self.callbacks:
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(epoch, metrics)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(epoch, metrics)


def _as_samples(training_set: TrainingSet) -> list[Tuple[Vector, Vector]]:
    items = training_set.items() if isinstance(training_set, Mapping) else training_set
    samples = []
    for inputs, target in items:
        if not isinstance(target, (int, float)):
            target = as_vector(target)
        samples.append((as_vector(inputs), target))
    return samples


__all__ = ["CostFunction", "ProgressCallback", "Trainer", "TrainingSet"]
