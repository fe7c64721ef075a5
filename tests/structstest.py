"""
Shared test models for all test files.

Consolidates the constructors and Pydantic models used across the test suite
so pipelines in different test files build the same result types.
"""

from dataclasses import dataclass
from typing import NamedTuple, Optional

from pydantic import BaseModel

# =============================================================================
# Pipeline constructors
# =============================================================================


def pair(first, second):
    """Two-argument constructor used by most pipeline scenarios."""
    return (first, second)


def collect(*args):
    """Constructor accepting any number of arguments."""
    return args


class Point(NamedTuple):
    x: int
    y: int


@dataclass(frozen=True)
class Person:
    name: str
    age: int
    email: str


@dataclass(frozen=True)
class Tagged:
    kind: str
    version: int
    payload: object


# =============================================================================
# Pydantic models (nested values decoded with `model`)
# =============================================================================


class Patient(BaseModel):
    """Sample Patient model for nested decoding."""

    id: str
    name: str
    active: bool
    age: Optional[int] = None


class Address(BaseModel):
    """Address structure for nested decoding."""

    street: list[str]
    city: str
    postal_code: str
