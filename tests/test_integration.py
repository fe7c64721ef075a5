"""End-to-end pipelines over realistic records."""

import json

from structstest import Patient, Tagged, collect

from decodepipe import (
    Err,
    ErrorKind,
    Ok,
    at,
    decode_string,
    decode_value,
    end,
    fail,
    hardcoded,
    integer,
    map2,
    model,
    number,
    optional,
    optional_at,
    required,
    required_at,
    resolve,
    start,
    string,
    value,
)


def _observation(kind, version, _payload):
    if version == 1:
        payload = at(["payload", "value"], number)
    elif version == 2:
        payload = map2(
            lambda ref, v: {"patient": ref.split("/")[-1], "value": v},
            at(["payload", "subject", "reference"], string),
            at(["payload", "value"], number),
        )
    else:
        return fail(f"Unsupported observation version {version}")
    return payload.map(lambda p: Tagged(kind, version, p))


observation = (
    start(_observation)
    >> required("kind", string)
    >> required("version", integer)
    >> required("payload", value)
    >> resolve
    >> end
)


class TestVersionedRecord:
    def test_version_2(self, versioned_record):
        result = decode_value(observation, versioned_record)
        assert result == Ok(Tagged("observation", 2, {"patient": "abc123", "value": 98.6}))

    def test_version_1(self):
        result = decode_value(
            observation, {"kind": "observation", "version": 1, "payload": {"value": 1.5}}
        )
        assert result == Ok(Tagged("observation", 1, 1.5))

    def test_unknown_version(self, versioned_record):
        result = decode_value(observation, {**versioned_record, "version": 9})
        assert isinstance(result, Err)
        assert result.error.kind == ErrorKind.FAILURE

    def test_extra_top_level_key(self, versioned_record):
        result = decode_value(observation, {**versioned_record, "meta": {}})
        assert isinstance(result, Err)
        assert result.error.keys == ("meta",)

    def test_from_text(self, versioned_record):
        text = json.dumps(versioned_record)
        assert isinstance(decode_string(observation, text), Ok)


class TestPatientEnvelope:
    def envelope(self):
        return (
            start(collect)
            >> required("patient", model(Patient))
            >> required_at(["meta", "source"], string)
            >> optional_at(["meta", "priority"], integer, 0)
            >> hardcoded("ingest-v1")
            >> optional("note", string, None)
            >> end
        )

    def test_full(self):
        data = {
            "patient": {"id": "abc123", "name": "Ada", "active": True, "age": 36},
            "meta": {"source": "ehr", "priority": 2},
            "note": "checked",
        }
        patient, source, priority, received_by, note = decode_value(self.envelope(), data).unwrap()
        assert patient.age == 36
        assert (source, priority, received_by, note) == ("ehr", 2, "ingest-v1", "checked")

    def test_minimal(self):
        data = {
            "patient": {"id": "abc123", "name": "Ada", "active": False},
            "meta": {"source": "ehr"},
        }
        result = decode_value(self.envelope(), data)
        assert isinstance(result, Ok)
        assert result.value[2] == 0

    def test_misspelled_key_rejected(self):
        data = {
            "patient": {"id": "abc123", "name": "Ada", "active": False},
            "meta": {"source": "ehr"},
            "notes": "typo",
        }
        result = decode_value(self.envelope(), data)
        assert isinstance(result, Err)
        assert result.error.kind == ErrorKind.UNCONSUMED_KEYS
        assert result.error.keys == ("notes",)
