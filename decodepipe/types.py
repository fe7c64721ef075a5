"""
Type definitions for decodepipe.

Provides a minimal Result type (Ok/Err) and the decode error record.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, NoReturn, TypeVar

T = TypeVar("T")
E = TypeVar("E")

# Type aliases
Path = tuple[str | int, ...]


class ErrorKind(Enum):
    """Kinds of decode failures."""

    TYPE_MISMATCH = "type_mismatch"
    MISSING_FIELD = "missing_field"
    DECODE_FAILURE = "decode_failure"
    UNCONSUMED_KEYS = "unconsumed_keys"
    BAD_JSON = "bad_json"
    FAILURE = "failure"


@dataclass(frozen=True, slots=True)
class DecodeError:
    """
    A single decode failure.

    `path` locates the failing value relative to the decoded input; `keys`
    is only populated for UNCONSUMED_KEYS and is always sorted.
    """

    kind: ErrorKind
    message: str
    path: Path = ()
    keys: tuple[str, ...] = ()

    def at(self, *prefix: str | int) -> DecodeError:
        """Return a copy of this error located under `prefix`."""
        return DecodeError(
            kind=self.kind,
            message=self.message,
            path=(*prefix, *self.path),
            keys=self.keys,
        )

    def __str__(self) -> str:
        if not self.path:
            return self.message
        return f"{format_path(self.path)}: {self.message}"


class DecodeErrorException(Exception):
    """Raised by `Err.unwrap()` to surface a DecodeError as an exception."""

    def __init__(self, error: DecodeError):
        super().__init__(str(error))
        self.error = error


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Success result containing a value."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Error result containing an error value."""

    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> NoReturn:
        if isinstance(self.error, DecodeError):
            raise DecodeErrorException(self.error)
        raise ValueError(f"Called unwrap() on Err: {self.error!r}")


Result = Ok[T] | Err[DecodeError]


def format_path(path: Path) -> str:
    """Render a path as `a.b[0].c`."""
    parts: list[str] = []
    for segment in path:
        if isinstance(segment, int):
            parts.append(f"[{segment}]")
        elif parts:
            parts.append(f".{segment}")
        else:
            parts.append(segment)
    return "".join(parts)


def describe(value: Any) -> str:
    """Short description of a JSON value for error messages."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    text = repr(value)
    if len(text) > 50:
        text = text[:47] + "..."
    return f"{type(value).__name__} {text}"
