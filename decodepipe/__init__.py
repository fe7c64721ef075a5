from .context import DecodeSettings, current_settings, decoding_context, is_strict
from .decode import (
    Decoder,
    and_then,
    at,
    boolean,
    decode_string,
    decode_value,
    dict_of,
    fail,
    field,
    index,
    integer,
    key_value_pairs,
    lazy,
    list_of,
    map2,
    map_,
    model,
    null,
    nullable,
    number,
    object_keys,
    one_of,
    string,
    succeed,
    value,
)
from .lib.path_helpers import PipelineConfigError
from .pipeline import (
    Accumulator,
    Step,
    chain,
    custom,
    end,
    end_lenient,
    finish,
    hardcoded,
    optional,
    optional_at,
    required,
    required_at,
    resolve,
    start,
)
from .types import DecodeError, DecodeErrorException, Err, ErrorKind, Ok

__all__ = [
    # Pipeline
    "start",
    "required",
    "required_at",
    "optional",
    "optional_at",
    "custom",
    "hardcoded",
    "resolve",
    "end",
    "end_lenient",
    "finish",
    "chain",
    "Step",
    "Accumulator",
    # Decoders
    "Decoder",
    "string",
    "integer",
    "number",
    "boolean",
    "value",
    "null",
    "nullable",
    "list_of",
    "dict_of",
    "key_value_pairs",
    "object_keys",
    "field",
    "at",
    "index",
    "one_of",
    "succeed",
    "fail",
    "and_then",
    "map_",
    "map2",
    "lazy",
    "model",
    "decode_value",
    "decode_string",
    # Context
    "decoding_context",
    "DecodeSettings",
    "current_settings",
    "is_strict",
    # Errors
    "Ok",
    "Err",
    "ErrorKind",
    "DecodeError",
    "DecodeErrorException",
    "PipelineConfigError",
]
