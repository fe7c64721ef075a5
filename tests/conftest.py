from typing import Any

import pytest


@pytest.fixture(scope="function")
def ab_with_extra() -> dict[str, Any]:
    return {"a": "foo", "b": "bar", "c": "baz"}


@pytest.fixture(scope="function")
def versioned_record() -> dict[str, Any]:
    return {
        "kind": "observation",
        "version": 2,
        "payload": {"subject": {"reference": "Patient/abc123"}, "value": 98.6},
    }
