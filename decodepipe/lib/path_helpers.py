"""
Helper functions for pipeline path handling.
"""

from typing import Sequence


class PipelineConfigError(ValueError):
    """A pipeline step was built with invalid arguments (e.g. an empty path)."""


def normalize_path(path: str | Sequence[str]) -> tuple[str, ...]:
    """
    Convert a path to a tuple of object keys.

    Accepts a dotted string ("data.patient.id") or a sequence of keys
    (["data", "patient", "id"]). Use the sequence form for keys that
    contain dots.

    Raises:
        PipelineConfigError: If the path has no segments or a segment is not a string
    """
    if isinstance(path, str):
        segments = tuple(path.split(".")) if path else ()
    else:
        segments = tuple(path)

    if not segments:
        raise PipelineConfigError("Empty path")

    for segment in segments:
        if not isinstance(segment, str):
            raise PipelineConfigError(
                f"Path segments must be str, got {type(segment).__name__}"
            )

    return segments
