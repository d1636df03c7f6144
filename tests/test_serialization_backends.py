#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import pytest

from daprlink.core.data.backends import JSONBackend, RawBytesBackend
from daprlink.core.data.config import SerializationConfig
from daprlink.core.utils.exceptions import SerializationError


class _Order:
    def __init__(self, order_id, items):
        self.order_id = order_id
        self.items = items

    def to_dict(self):
        return {"orderId": self.order_id, "items": self.items}


def test_json_backend_writes_compact_utf8_by_default():
    backend = JSONBackend()

    blob = backend.serialize({"name": "jimmy", "city": "Zürich", "tags": [1, 2]})

    assert blob == '{"name":"jimmy","city":"Zürich","tags":[1,2]}'.encode("utf-8")


def test_json_backend_roundtrip_preserves_structure():
    backend = JSONBackend()
    payload = {"numbers": [1, 2, 3], "nested": {"ok": True, "missing": None}}

    assert backend.deserialize(backend.serialize(payload)) == payload


def test_json_backend_uses_to_dict_for_custom_objects():
    backend = JSONBackend()

    blob = backend.serialize(_Order(7, ["apple"]))

    assert backend.deserialize(blob) == {"orderId": 7, "items": ["apple"]}


def test_json_backend_roundtrip_for_extended_types():
    backend = JSONBackend(SerializationConfig(extended_types=True))
    payload = {
        "tuple": (1, 2),
        "set": {"a", "b"},
        "complex": 1 + 2j,
        "bytes": b"ab",
    }

    decoded = backend.deserialize(backend.serialize(payload))

    assert decoded["tuple"] == (1, 2)
    assert decoded["set"] == {"a", "b"}
    assert decoded["complex"] == 1 + 2j
    assert decoded["bytes"] == b"ab"


def test_json_backend_honours_sort_keys_and_pretty_separators():
    backend = JSONBackend(SerializationConfig(sort_keys=True, compact=False))

    assert backend.serialize({"b": 1, "a": 2}) == b'{"a": 2, "b": 1}'


def test_json_backend_empty_payload_decodes_to_none():
    assert JSONBackend().deserialize(b"") is None


def test_json_backend_invalid_data_raises_serialization_error():
    with pytest.raises(SerializationError) as exc_info:
        JSONBackend().deserialize(b"{not json")

    assert exc_info.value.operation == "deserialize"
    assert exc_info.value.serialization_format == "json"


def test_json_backend_unsupported_type_raises_serialization_error():
    with pytest.raises(SerializationError) as exc_info:
        JSONBackend().serialize({"handle": object()})

    assert exc_info.value.operation == "serialize"


def test_raw_backend_passes_bytes_through():
    backend = RawBytesBackend()

    assert backend.serialize(bytearray(b"\x00\x01")) == b"\x00\x01"
    assert backend.deserialize(b"\xff\xfe") == b"\xff\xfe"
    assert backend.deserialize(b"") is None


def test_raw_backend_rejects_non_bytes():
    with pytest.raises(SerializationError):
        RawBytesBackend().serialize("text")
