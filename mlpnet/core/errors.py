"""Typed error taxonomy shared by every mlpnet component."""

from __future__ import annotations

from enum import Enum
from typing import ClassVar


class ErrorKind(str, Enum):
    """Discriminator carried by every :class:`NetworkError`."""

    SIZE_MISMATCH = "size_mismatch"
    INVALID_FORMAT = "invalid_format"
    USER_COST_FUNCTION_MISSING = "userdef_costf_not_defined"


class NetworkError(Exception):
    """Base class for all failures raised by mlpnet."""

    kind: ClassVar[ErrorKind]


class SizeMismatch(NetworkError, ValueError):
    """A vector, target or topology has the wrong length."""

    kind = ErrorKind.SIZE_MISMATCH


class InvalidFormat(NetworkError, ValueError):
    """A serialized stream does not follow the expected grammar."""

    kind = ErrorKind.INVALID_FORMAT


class UserCostFunctionMissing(NetworkError, LookupError):
    """The user-defined cost policy is selected but no function was supplied."""

    kind = ErrorKind.USER_COST_FUNCTION_MISSING


__all__ = [
    "ErrorKind",
    "NetworkError",
    "SizeMismatch",
    "InvalidFormat",
    "UserCostFunctionMissing",
]
