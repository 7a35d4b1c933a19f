#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import pytest

from robotremote.core.data.backends import JSONBackend, SerializationBackend, to_wire_value
from robotremote.core.utils.exceptions import SerializationError
from robotremote.protocols.models import KeywordResult


def test_json_backend_is_a_serialization_backend():
    assert isinstance(JSONBackend(), SerializationBackend)


def test_keyword_values_are_coerced_for_the_wire():
    class Opaque:
        def __str__(self):
            return "opaque"

    payload = {
        "none": None,
        "tuple": (1, 2),
        "nested": {1: [None, Opaque()]},
    }

    assert to_wire_value(payload) == {
        "none": "",
        "tuple": [1, 2],
        "nested": {"1": ["", "opaque"]},
    }


def test_bytes_survive_transport():
    backend = JSONBackend()

    decoded = backend.deserialize(backend.serialize({"blob": b"\x00\xffab"}))

    assert decoded == {"blob": b"\x00\xffab"}


def test_result_envelope_serializes_with_protocol_keys():
    backend = JSONBackend()

    decoded = backend.deserialize(backend.serialize(KeywordResult.passed(None, "*INFO:1* hi\n").to_dict()))

    assert decoded == {
        "status": "PASS",
        "return": "",
        "output": "*INFO:1* hi\n",
        "error": "",
        "traceback": "",
    }


def test_empty_payload_decodes_to_none():
    assert JSONBackend().deserialize(b"") is None


def test_invalid_data_raises_serialization_error():
    with pytest.raises(SerializationError):
        JSONBackend().deserialize(b"{not json")
