"""
Decoder primitives for decodepipe.

A Decoder wraps a function from an already-parsed JSON value (dict, list,
str, int, float, bool or None) to Ok(result) or Err(DecodeError). Decoders
are immutable and compose with `map`, `and_then`, `one_of` and friends.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, Sequence, TypeVar

from pydantic import BaseModel, ValidationError

from .lib.path_helpers import normalize_path
from .types import DecodeError, Err, ErrorKind, Ok, Result, describe

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")
V = TypeVar("V")
_Model = TypeVar("_Model", bound=BaseModel)


@dataclass(frozen=True, slots=True)
class Decoder(Generic[T]):
    """
    Immutable decoder node.

    The fundamental building block. Wraps a run function that never raises
    for bad data: every data problem comes back as an Err.
    """

    run: Callable[[Any], Result[T]]

    def __call__(self, data: Any) -> Result[T]:
        return self.run(data)

    def map(self, fn: Callable[[T], U]) -> Decoder[U]:
        """Transform a successfully decoded value."""
        return map_(fn, self)

    def and_then(self, fn: Callable[[T], Decoder[U]]) -> Decoder[U]:
        """Choose the next decoder from a successfully decoded value."""
        return and_then(self, fn)

    def __rshift__(self, step: Callable[[Decoder[T]], Decoder[U]]) -> Decoder[U]:
        """
        Apply a pipeline step with >> operator.

        Usage:
            start(Point) >> required("x", integer) >> required("y", integer) >> end
        """
        if isinstance(step, Decoder) or not callable(step):
            raise TypeError(
                f"Cannot chain a Decoder with {type(step).__name__}; expected a pipeline step"
            )
        return step(self)


def _is_object(data: Any) -> bool:
    return isinstance(data, dict) and all(isinstance(k, str) for k in data)


def _mismatch(expected: str, data: Any) -> Err[DecodeError]:
    return Err(DecodeError(ErrorKind.DECODE_FAILURE, f"Expected {expected}, got {describe(data)}"))


# Primitive values


def _string(data: Any) -> Result[str]:
    if isinstance(data, str):
        return Ok(data)
    return _mismatch("a string", data)


def _integer(data: Any) -> Result[int]:
    if isinstance(data, bool):
        return _mismatch("an integer", data)
    if isinstance(data, int):
        return Ok(data)
    if isinstance(data, float) and data.is_integer():
        return Ok(int(data))
    return _mismatch("an integer", data)


def _number(data: Any) -> Result[float]:
    if isinstance(data, (int, float)) and not isinstance(data, bool):
        return Ok(data)
    return _mismatch("a number", data)


def _boolean(data: Any) -> Result[bool]:
    if isinstance(data, bool):
        return Ok(data)
    return _mismatch("a boolean", data)


string: Decoder[str] = Decoder(_string)
integer: Decoder[int] = Decoder(_integer)
number: Decoder[float] = Decoder(_number)
boolean: Decoder[bool] = Decoder(_boolean)
value: Decoder[Any] = Decoder(Ok)


def null(fallback: T) -> Decoder[T]:
    """Succeed with `fallback` only when the JSON value is null."""

    def run(data: Any) -> Result[T]:
        if data is None:
            return Ok(fallback)
        return _mismatch("null", data)

    return Decoder(run)


def nullable(decoder: Decoder[T]) -> Decoder[T | None]:
    """Decode null as None, anything else with `decoder`."""
    return one_of([null(None), decoder])


def succeed(result: T) -> Decoder[T]:
    """Ignore the input and succeed with `result`."""
    return Decoder(lambda _data: Ok(result))


def fail(message: str) -> Decoder[Any]:
    """Ignore the input and fail with `message`."""
    return Decoder(lambda _data: Err(DecodeError(ErrorKind.FAILURE, message)))


# Containers


def list_of(decoder: Decoder[T]) -> Decoder[list[T]]:
    """Decode a JSON array, every item with `decoder`."""

    def run(data: Any) -> Result[list[T]]:
        if not isinstance(data, list):
            return _mismatch("a list", data)
        items: list[T] = []
        for i, item in enumerate(data):
            result = decoder.run(item)
            if isinstance(result, Err):
                return Err(result.error.at(i))
            items.append(result.value)
        return Ok(items)

    return Decoder(run)


def key_value_pairs(decoder: Decoder[T]) -> Decoder[list[tuple[str, T]]]:
    """Decode a JSON object into (key, value) pairs, every value with `decoder`."""

    def run(data: Any) -> Result[list[tuple[str, T]]]:
        if not _is_object(data):
            return Err(
                DecodeError(ErrorKind.TYPE_MISMATCH, f"Expected an object, got {describe(data)}")
            )
        pairs: list[tuple[str, T]] = []
        for key, item in data.items():
            result = decoder.run(item)
            if isinstance(result, Err):
                return Err(result.error.at(key))
            pairs.append((key, result.value))
        return Ok(pairs)

    return Decoder(run)


def dict_of(decoder: Decoder[T]) -> Decoder[dict[str, T]]:
    """Decode a JSON object into a dict, every value with `decoder`."""
    return key_value_pairs(decoder).map(dict)


def _object_keys(data: Any) -> Result[frozenset[str]]:
    if not _is_object(data):
        return Err(DecodeError(ErrorKind.TYPE_MISMATCH, f"Expected an object, got {describe(data)}"))
    return Ok(frozenset(data))


object_keys: Decoder[frozenset[str]] = Decoder(_object_keys)


def field(key: str, decoder: Decoder[T]) -> Decoder[T]:
    """Decode the value under `key` of a JSON object."""

    def run(data: Any) -> Result[T]:
        if not _is_object(data):
            return Err(
                DecodeError(
                    ErrorKind.TYPE_MISMATCH,
                    f"Expected an object with field '{key}', got {describe(data)}",
                )
            )
        if key not in data:
            return Err(DecodeError(ErrorKind.MISSING_FIELD, f"Missing field '{key}'"))
        result = decoder.run(data[key])
        if isinstance(result, Err):
            return Err(result.error.at(key))
        return result

    return Decoder(run)


def at(path: str | Sequence[str], decoder: Decoder[T]) -> Decoder[T]:
    """
    Decode a nested value of a JSON object.

    Usage:
        at(["data", "patient", "id"], string)
        at("data.patient.id", string)   # Same as above

    An empty path decodes the input itself.
    """
    segments = normalize_path(path) if path else ()
    nested = decoder
    for key in reversed(segments):
        nested = field(key, nested)
    return nested


def index(i: int, decoder: Decoder[T]) -> Decoder[T]:
    """Decode the item at position `i` of a JSON array."""

    def run(data: Any) -> Result[T]:
        if not isinstance(data, list):
            return _mismatch("a list", data)
        if not 0 <= i < len(data):
            return Err(
                DecodeError(
                    ErrorKind.MISSING_FIELD,
                    f"Missing index {i} in list of length {len(data)}",
                )
            )
        result = decoder.run(data[i])
        if isinstance(result, Err):
            return Err(result.error.at(i))
        return result

    return Decoder(run)


# Combinators


def one_of(decoders: Sequence[Decoder[T]]) -> Decoder[T]:
    """
    Try decoders in order; the first success wins.

    When every alternative fails, a single failure is returned unchanged and
    several are merged into one DECODE_FAILURE listing each message.
    """
    alternatives = tuple(decoders)

    def run(data: Any) -> Result[T]:
        errors: list[DecodeError] = []
        for decoder in alternatives:
            result = decoder.run(data)
            if isinstance(result, Ok):
                return result
            errors.append(result.error)
        if len(errors) == 1:
            return Err(errors[0])
        if not errors:
            return Err(DecodeError(ErrorKind.FAILURE, "one_of() with no alternatives"))
        listed = "; ".join(f"({n}) {e}" for n, e in enumerate(errors, start=1))
        return Err(DecodeError(ErrorKind.DECODE_FAILURE, f"All alternatives failed: {listed}"))

    return Decoder(run)


def and_then(decoder: Decoder[T], fn: Callable[[T], Decoder[U]]) -> Decoder[U]:
    """Run `decoder`, then run the decoder `fn` picks against the same input."""

    def run(data: Any) -> Result[U]:
        result = decoder.run(data)
        if isinstance(result, Err):
            return result
        return fn(result.value).run(data)

    return Decoder(run)


def map_(fn: Callable[[T], U], decoder: Decoder[T]) -> Decoder[U]:
    """Transform the result of `decoder` with `fn`."""

    def run(data: Any) -> Result[U]:
        result = decoder.run(data)
        if isinstance(result, Err):
            return result
        return Ok(fn(result.value))

    return Decoder(run)


def map2(fn: Callable[[T, U], V], first: Decoder[T], second: Decoder[U]) -> Decoder[V]:
    """Run both decoders against the same input and combine their results."""

    def run(data: Any) -> Result[V]:
        a = first.run(data)
        if isinstance(a, Err):
            return a
        b = second.run(data)
        if isinstance(b, Err):
            return b
        return Ok(fn(a.value, b.value))

    return Decoder(run)


def lazy(thunk: Callable[[], Decoder[T]]) -> Decoder[T]:
    """Defer building a decoder until it runs, for recursive structures."""
    return Decoder(lambda data: thunk().run(data))


def model(model_class: type[_Model]) -> Decoder[_Model]:
    """
    Decode a JSON value into a Pydantic model.

    Pydantic validation errors become a DECODE_FAILURE located at the first
    failing field.
    """

    def run(data: Any) -> Result[_Model]:
        try:
            return Ok(model_class.model_validate(data))
        except ValidationError as e:
            details = e.errors()
            loc = tuple(details[0]["loc"]) if details else ()
            messages = "; ".join(d["msg"] for d in details)
            return Err(
                DecodeError(
                    ErrorKind.DECODE_FAILURE,
                    f"Invalid {model_class.__name__}: {messages}",
                    path=loc,
                )
            )

    return Decoder(run)


# Entry points


def decode_value(decoder: Decoder[T], data: Any) -> Result[T]:
    """Run `decoder` against an already-parsed JSON value."""
    result = decoder.run(data)
    if isinstance(result, Err):
        logger.debug("Decode failed: %s", result.error)
    return result


def decode_string(decoder: Decoder[T], text: str | bytes) -> Result[T]:
    """Parse JSON text and run `decoder` against it."""
    try:
        data = json.loads(text)
    except ValueError as e:
        logger.debug("Invalid JSON input: %s", e)
        return Err(DecodeError(ErrorKind.BAD_JSON, f"Invalid JSON: {e}"))
    except RecursionError:
        logger.debug("JSON input nested too deeply")
        return Err(DecodeError(ErrorKind.BAD_JSON, "Invalid JSON: nested too deeply"))
    return decode_value(decoder, data)
