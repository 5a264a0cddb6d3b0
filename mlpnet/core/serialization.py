"""Text stream reader/writer used by the persisted network format.

The format is a flat sequence of whitespace separated tokens: literal tags
(``ann``, ``inputs``, ``topology``, ``layer``, ``neuron``...) interleaved with
numbers.  Floats are written with :func:`repr`, which is locale independent and
round-trips every ``float64`` bit for bit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Generic, Iterator, Optional, TextIO, TypeVar

from .errors import ErrorKind, InvalidFormat, NetworkError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def format_float(value: float) -> str:
    """Return the shortest decimal text that parses back to ``value``."""

    return repr(float(value))


class TokenWriter:
    """Line oriented writer on top of a text stream."""

    def __init__(self, stream: TextIO) -> None:
        self.stream = stream

    def tag(self, name: str) -> None:
        self.stream.write(f"{name}\n")

    def write_float(self, value: float) -> None:
        self.stream.write(f"{format_float(value)}\n")

    def write_int(self, value: int) -> None:
        self.stream.write(f"{int(value)}\n")

    def blank(self) -> None:
        self.stream.write("\n")


class TokenReader:
    """Whitespace tokenizer over a text stream.

    Every failure (missing token, unexpected tag, unparsable number) raises
    :class:`~mlpnet.core.errors.InvalidFormat`.
    """

    def __init__(self, stream: TextIO) -> None:
        self._tokens = self._iter_tokens(stream)
        self.position = 0

    @staticmethod
    def _iter_tokens(stream: TextIO) -> Iterator[str]:
        for line in stream:
            yield from line.split()

    def next_token(self) -> str:
        try:
            token = next(self._tokens)
        except StopIteration:
            raise InvalidFormat(
                f"unexpected end of stream after {self.position} tokens"
            ) from None
        self.position += 1
        return token

    def expect(self, tag: str) -> None:
        token = self.next_token()
        if token != tag:
            raise InvalidFormat(
                f"expected tag {tag!r} at token {self.position}, found {token!r}"
            )

    def read_float(self) -> float:
        token = self.next_token()
        try:
            return float(token)
        except ValueError:
            raise InvalidFormat(
                f"token {self.position} is not a number: {token!r}"
            ) from None

    def read_int(self) -> int:
        token = self.next_token()
        try:
            return int(token)
        except ValueError:
            raise InvalidFormat(
                f"token {self.position} is not an integer: {token!r}"
            ) from None


@dataclass(frozen=True)
class LoadResult(Generic[T]):
    """Tagged result of a load: either ``value`` or ``error`` is set."""

    value: Optional[T] = None
    error: Optional[NetworkError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> Optional[ErrorKind]:
        return None if self.error is None else self.error.kind

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        assert self.value is not None
        return self.value


def try_load(stream: TextIO, loader: Callable[[TextIO], T]) -> LoadResult[T]:
    """Run ``loader`` on ``stream`` and fold mlpnet errors into a result."""

    try:
        return LoadResult(value=loader(stream))
    except NetworkError as exc:
        logger.debug("load failed (%s): %s", exc.kind.value, exc)
        return LoadResult(error=exc)


def save_file(path: str | Path, obj) -> Path:
    """Write ``obj`` (anything with ``save(stream)``) to ``path``."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        obj.save(handle)
    return path


def load_file(path: str | Path, loader: Callable[[TextIO], T]) -> T:
    """Open ``path`` and hand the stream to ``loader``."""

    with Path(path).open("r", encoding="utf-8") as handle:
        return loader(handle)


__all__ = [
    "LoadResult",
    "TokenReader",
    "TokenWriter",
    "format_float",
    "load_file",
    "save_file",
    "try_load",
]
