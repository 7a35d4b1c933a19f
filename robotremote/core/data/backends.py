#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Wire codec for protocol payloads.

Requests are JSON arrays of positional protocol parameters; responses are
JSON values. Keyword return values are arbitrary Python objects, so encoding
follows the remote-library convention instead of failing on exotic types:

- ``None`` becomes ``""``
- tuples, sets and other iterables become lists
- mappings keep their keys as strings
- ``bytes`` are tagged so the client can restore them
- anything else is sent as ``str(value)``
"""

import json
from collections.abc import Iterable, Mapping
from typing import Any, Protocol, runtime_checkable

from ..utils.exceptions import SerializationError

_BYTES_TAG = "__bytes__"


@runtime_checkable
class SerializationBackend(Protocol):
    """Interface every wire codec implements"""

    def serialize(self, obj: Any) -> bytes:
        ...

    def deserialize(self, data: bytes) -> Any:
        ...


def to_wire_value(value: Any) -> Any:
    """
    Recursively convert a keyword value into something JSON can carry.
    """
    if value is None:
        return ""
    if isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, (bytes, bytearray)):
        return {_BYTES_TAG: bytes(value).decode("latin-1")}
    if isinstance(value, Mapping):
        return {str(key): to_wire_value(item) for key, item in value.items()}
    if isinstance(value, Iterable):
        return [to_wire_value(item) for item in value]
    return str(value)


def from_wire_value(value: Any) -> Any:
    if isinstance(value, dict):
        if set(value.keys()) == {_BYTES_TAG}:
            return value[_BYTES_TAG].encode("latin-1")
        return {key: from_wire_value(item) for key, item in value.items()}
    if isinstance(value, list):
        return [from_wire_value(item) for item in value]
    return value


class JSONBackend:
    """JSON wire codec with remote-library value coercion"""

    def __init__(self, ensure_ascii: bool = False) -> None:
        self.ensure_ascii = ensure_ascii

    def serialize(self, obj: Any) -> bytes:
        try:
            encoded = json.dumps(to_wire_value(obj), ensure_ascii=self.ensure_ascii)
            return encoded.encode("utf-8")
        except (TypeError, ValueError) as e:
            raise SerializationError(
                operation="serialize",
                message=f"JSON serialization failed: {e}",
                data_type=type(obj).__name__,
                cause=e,
            ) from e

    def deserialize(self, data: bytes) -> Any:
        if not data:
            return None
        try:
            return from_wire_value(json.loads(data.decode("utf-8")))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise SerializationError(
                operation="deserialize",
                message=f"JSON deserialization failed: {e}",
                cause=e,
            ) from e
