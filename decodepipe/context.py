"""
Decode settings scoped to the current context (thread or asyncio task).

Settings are read when a decoder runs, not when it is built, so the same
pipeline can be run strictly in one place and leniently in another.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, replace
from typing import Iterator


@dataclass(frozen=True, slots=True)
class DecodeSettings:
    """
    Options consulted by context-driven terminals.

    strict: `finish` rejects objects with unclaimed top-level keys, like `end`.
    """

    strict: bool = False


_settings: ContextVar[DecodeSettings] = ContextVar("decode_settings", default=DecodeSettings())


def current_settings() -> DecodeSettings:
    """Settings in effect for decodes run right now."""
    return _settings.get()


def is_strict() -> bool:
    return current_settings().strict


@contextmanager
def decoding_context(*, strict: bool | None = None) -> Iterator[DecodeSettings]:
    """
    Override decode settings inside a block.

    Options left as None keep the value of the enclosing context. Yields the
    settings in effect inside the block.

    Example:
        person = start(Person) >> required("name", string) >> finish

        decode_value(person, {"name": "Ada", "age": 36})      # Ok, "age" ignored

        with decoding_context(strict=True):
            decode_value(person, {"name": "Ada", "age": 36})  # Err, "age" unconsumed
    """
    settings = current_settings()
    if strict is not None:
        settings = replace(settings, strict=strict)
    token = _settings.set(settings)
    try:
        yield settings
    finally:
        _settings.reset(token)
