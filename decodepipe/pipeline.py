"""
Pipeline steps for building object decoders field by field.

A pipeline starts from a constructor, gathers one decoded argument per step
and calls the constructor once all steps have run:

    point = start(Point) >> required("x", integer) >> required("y", integer) >> end

Alongside the arguments, the pipeline tracks which top-level keys of the input
object no step has claimed yet. `end` fails when any remain; `end_lenient`
ignores them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from dataclasses import field as dataclass_field
from functools import reduce
from typing import Any, Callable, Sequence

from .context import is_strict
from .decode import Decoder, and_then, at, field, map2, map_, object_keys, value
from .lib.path_helpers import normalize_path
from .types import DecodeError, Err, ErrorKind, Ok, Result

logger = logging.getLogger(__name__)

Pipeline = Decoder["Accumulator"]


@dataclass(frozen=True, slots=True)
class Accumulator:
    """
    In-flight state of a pipeline.

    `pending` holds the top-level keys of the input object that no step has
    claimed yet; it only ever shrinks. Every method returns a new Accumulator.
    """

    constructor: Callable[..., Any]
    args: tuple[Any, ...] = ()
    pending: frozenset[str] = dataclass_field(default_factory=frozenset)
    # Set by `resolve`: `constructor` is already a result, not a function to call
    resolved: bool = False

    def apply(self, arg: Any) -> Accumulator:
        """Return a copy with `arg` appended to the constructor arguments."""
        return replace(self, args=(*self.args, arg))

    def claim(self, key: str | None) -> Accumulator:
        """Return a copy with `key` removed from the pending keys."""
        if key is None or key not in self.pending:
            return self
        return replace(self, pending=self.pending - {key})

    def build(self) -> Any:
        """
        Call the constructor with every argument gathered so far.

        A resolved accumulator with no further arguments returns its result
        as is; further arguments are applied to that result.
        """
        if self.resolved and not self.args:
            return self.constructor
        return self.constructor(*self.args)

    @classmethod
    def settled(cls, result: Any, pending: frozenset[str]) -> Accumulator:
        """An accumulator holding `result`, which later steps may still apply arguments to."""
        return cls(constructor=result, pending=pending, resolved=True)


class Step:
    """
    A pipeline step: turns a pipeline decoder into a new decoder.

    Steps apply to decoders with >> and compose with each other the same way:

        name_fields = required("first", string) >> required("last", string)
        person = start(Person) >> name_fields >> end
    """

    def __init__(self, func: Callable[[Decoder[Any]], Decoder[Any]], name: str | None = None):
        self.func = func
        # Preserve function metadata
        self.__name__ = name or _name(func)
        self.__doc__ = getattr(func, "__doc__", None)

    def __call__(self, pipeline: Decoder[Any]) -> Decoder[Any]:
        return self.func(pipeline)

    def __rshift__(self, other: Step | Callable[[Decoder[Any]], Decoder[Any]]) -> Step:
        """Compose with another step; `self` runs first."""
        return chain(self, other)

    def __repr__(self) -> str:
        return f"Step({self.__name__})"


def _name(fn: Callable) -> str:
    return getattr(fn, "__name__", repr(fn))


def chain(*steps: Step | Callable[[Decoder[Any]], Decoder[Any]]) -> Step:
    """
    Compose steps left to right into a single Step.

    Usage:
        address = chain(required("street", string), required("city", string))
        person = start(Person) >> required("name", string) >> address >> end
    """
    for s in steps:
        if isinstance(s, Decoder) or not callable(s):
            raise TypeError(f"Cannot chain {type(s).__name__}; expected a pipeline step")

    def run_all(pipeline: Decoder[Any]) -> Decoder[Any]:
        return reduce(lambda acc, step: step(acc), steps, pipeline)

    return Step(run_all, name=" >> ".join(_name(s) for s in steps) or "chain()")


def _named(step: Step, name: str) -> Step:
    step.__name__ = name
    return step


# Pipeline start


def start(constructor: Callable[..., Any]) -> Pipeline:
    """
    Begin a pipeline that will build its result with `constructor`.

    The input must be a JSON object (TYPE_MISMATCH otherwise); its top-level
    keys become the pending keys that later steps claim.
    """
    return map_(lambda keys: Accumulator(constructor=constructor, pending=keys), object_keys)


# Field steps


def custom(key: str | None, decoder: Decoder[Any]) -> Step:
    """
    Apply the value `decoder` produces from the whole input, claiming `key`.

    `decoder` runs against the same object the pipeline started from and may
    read any part of it. Pass `key=None` to claim nothing.

    Usage:
        start(Span) >> custom("range", at(["range", "start"], integer)) >> ...
    """

    def step(pipeline: Pipeline) -> Pipeline:
        return map2(lambda acc, decoded: acc.apply(decoded).claim(key), pipeline, decoder)

    return Step(step, name=f"custom({key!r})")


def required(key: str, decoder: Decoder[Any]) -> Step:
    """
    Decode the field `key` with `decoder`.

    Fails with MISSING_FIELD when the key is absent and with the decoder's own
    error when the value is rejected.
    """
    return _named(custom(key, field(key, decoder)), f"required({key!r})")


def required_at(path: str | Sequence[str], decoder: Decoder[Any]) -> Step:
    """
    Decode a nested field with `decoder`, claiming only the first path segment.

    Raises:
        PipelineConfigError: If `path` is empty
    """
    segments = normalize_path(path)
    return _named(custom(segments[0], at(segments, decoder)), f"required_at({list(segments)!r})")


def optional(key: str, decoder: Decoder[Any], fallback: Any) -> Step:
    """
    Decode the field `key` if present, otherwise use `fallback`.

    A null value also yields `fallback`, unless `decoder` itself accepts null.
    A present value `decoder` rejects fails the pipeline.
    """
    return _named(custom(key, _optional_decoder((key,), decoder, fallback)), f"optional({key!r})")


def optional_at(path: str | Sequence[str], decoder: Decoder[Any], fallback: Any) -> Step:
    """
    Nested counterpart of `optional`, claiming only the first path segment.

    Any path segment that cannot be reached counts as absent.

    Raises:
        PipelineConfigError: If `path` is empty
    """
    segments = normalize_path(path)
    return _named(
        custom(segments[0], _optional_decoder(segments, decoder, fallback)),
        f"optional_at({list(segments)!r})",
    )


def hardcoded(constant: Any) -> Step:
    """Apply `constant` without reading the input or claiming any key."""

    def step(pipeline: Pipeline) -> Pipeline:
        return map_(lambda acc: acc.apply(constant), pipeline)

    return Step(step, name=f"hardcoded({constant!r})")


def _optional_decoder(path: tuple[str, ...], decoder: Decoder[Any], fallback: Any) -> Decoder[Any]:
    """
    Decoder for the optional-field policy.

    Failing to reach the value means "absent". A reached null falls back only
    after `decoder` has had its chance to handle it.
    """
    locate = at(path, value)

    def run(data: Any) -> Result[Any]:
        found = locate.run(data)
        if isinstance(found, Err):
            return Ok(fallback)
        result = decoder.run(found.value)
        if isinstance(result, Ok):
            return result
        if found.value is None:
            return Ok(fallback)
        return Err(result.error.at(*path))

    return Decoder(run)


# Resolution


def _resolve(pipeline: Pipeline) -> Pipeline:
    """
    Run the Decoder a pipeline built against the same input.

    Use when late pipeline values decide how the result is decoded, e.g. a
    version field picking the final decoder. Pending keys carry over unchanged.

    Raises:
        TypeError: At decode time, if the pipeline built something other than a Decoder
    """

    def run_inner(acc: Accumulator) -> Pipeline:
        inner = acc.build()
        if not isinstance(inner, Decoder):
            raise TypeError(
                f"resolve expects the pipeline to build a Decoder, got {type(inner).__name__}"
            )
        return map_(lambda result: Accumulator.settled(result, acc.pending), inner)

    return and_then(pipeline, run_inner)


# Terminals


def _unconsumed(pending: frozenset[str]) -> Err[DecodeError]:
    keys = tuple(sorted(pending))
    listed = ", ".join(repr(k) for k in keys)
    logger.debug("Strict pipeline left keys unconsumed: %s", listed)
    return Err(
        DecodeError(
            ErrorKind.UNCONSUMED_KEYS,
            f"Unexpected keys in object: {listed}",
            keys=keys,
        )
    )


def _end(pipeline: Pipeline) -> Decoder[Any]:
    """Strict terminal: fail with UNCONSUMED_KEYS if any top-level key went unclaimed."""

    def run(data: Any) -> Result[Any]:
        result = pipeline.run(data)
        if isinstance(result, Err):
            return result
        acc = result.value
        if acc.pending:
            return _unconsumed(acc.pending)
        return Ok(acc.build())

    return Decoder(run)


def _end_lenient(pipeline: Pipeline) -> Decoder[Any]:
    """Terminal that ignores unclaimed keys."""
    return map_(lambda acc: acc.build(), pipeline)


def _finish(pipeline: Pipeline) -> Decoder[Any]:
    """Terminal that is strict only inside `decoding_context(strict=True)`."""
    strict, lenient = _end(pipeline), _end_lenient(pipeline)

    def run(data: Any) -> Result[Any]:
        return (strict if is_strict() else lenient).run(data)

    return Decoder(run)


resolve = Step(_resolve, name="resolve")
end = Step(_end, name="end")
end_lenient = Step(_end_lenient, name="end_lenient")
finish = Step(_finish, name="finish")
