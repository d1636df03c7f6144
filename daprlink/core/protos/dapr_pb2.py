#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Protocol buffer messages of the Dapr sidecar API used by daprlink.

Descriptors are assembled here and registered in the default descriptor pool,
the same pool protoc-generated modules use, so the resulting classes interoperate
with ``google.protobuf.any_pb2`` and ``empty_pb2``. Field numbers follow
``dapr/proto/common/v1/common.proto`` and ``dapr/proto/runtime/v1/dapr.proto``.
"""

from typing import Optional, Sequence, Tuple

from google.protobuf import any_pb2, descriptor_pb2, descriptor_pool, empty_pb2
from google.protobuf import message_factory

COMMON_PACKAGE = "dapr.proto.common.v1"
RUNTIME_PACKAGE = "dapr.proto.runtime.v1"

_Field = descriptor_pb2.FieldDescriptorProto

_STRING = _Field.TYPE_STRING
_BYTES = _Field.TYPE_BYTES
_INT32 = _Field.TYPE_INT32
_MESSAGE = _Field.TYPE_MESSAGE
_ENUM = _Field.TYPE_ENUM

# (name, number, type, type_name or None, repeated)
FieldSpec = Tuple[str, int, int, Optional[str], bool]


def _camel_case(name: str) -> str:
    return "".join(part[:1].upper() + part[1:] for part in name.split("_"))


def _add_message(
    container,
    package: str,
    name: str,
    fields: Sequence[FieldSpec] = (),
    string_maps: Sequence[Tuple[str, int]] = (),
) -> descriptor_pb2.DescriptorProto:
    full_name = "{0}.{1}".format(package, name)
    message = container.add(name=name)
    for field_name, number, field_type, type_name, repeated in fields:
        field = message.field.add(
            name=field_name,
            number=number,
            type=field_type,
            label=_Field.LABEL_REPEATED if repeated else _Field.LABEL_OPTIONAL,
        )
        if type_name:
            field.type_name = type_name
    for map_name, number in string_maps:
        entry_name = _camel_case(map_name) + "Entry"
        entry = message.nested_type.add(name=entry_name)
        entry.options.map_entry = True
        entry.field.add(name="key", number=1, type=_STRING, label=_Field.LABEL_OPTIONAL)
        entry.field.add(name="value", number=2, type=_STRING, label=_Field.LABEL_OPTIONAL)
        message.field.add(
            name=map_name,
            number=number,
            type=_MESSAGE,
            label=_Field.LABEL_REPEATED,
            type_name=".{0}.{1}".format(full_name, entry_name),
        )
    return message


def _add_enum(container, name: str, values: Sequence[str]) -> None:
    enum = container.add(name=name)
    for number, value_name in enumerate(values):
        enum.value.add(name=value_name, number=number)


def _common_file() -> descriptor_pb2.FileDescriptorProto:
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="dapr/proto/common/v1/common.proto",
        package=COMMON_PACKAGE,
        syntax="proto3",
        dependency=["google/protobuf/any.proto"],
    )
    pkg = COMMON_PACKAGE

    http_extension = _add_message(
        file_proto.message_type,
        pkg,
        "HTTPExtension",
        fields=[("verb", 1, _ENUM, ".{0}.HTTPExtension.Verb".format(pkg), False)],
        string_maps=[("querystring", 2)],
    )
    _add_enum(
        http_extension.enum_type,
        "Verb",
        ["NONE", "GET", "HEAD", "POST", "PUT", "DELETE", "CONNECT", "OPTIONS", "TRACE"],
    )

    _add_message(
        file_proto.message_type,
        pkg,
        "InvokeRequest",
        fields=[
            ("method", 1, _STRING, None, False),
            ("data", 2, _MESSAGE, ".google.protobuf.Any", False),
            ("content_type", 3, _STRING, None, False),
            ("http_extension", 4, _MESSAGE, ".{0}.HTTPExtension".format(pkg), False),
        ],
    )
    _add_message(
        file_proto.message_type,
        pkg,
        "InvokeResponse",
        fields=[
            ("data", 1, _MESSAGE, ".google.protobuf.Any", False),
            ("content_type", 2, _STRING, None, False),
        ],
    )

    state_options = _add_message(
        file_proto.message_type,
        pkg,
        "StateOptions",
        fields=[
            ("concurrency", 1, _ENUM, ".{0}.StateOptions.StateConcurrency".format(pkg), False),
            ("consistency", 2, _ENUM, ".{0}.StateOptions.StateConsistency".format(pkg), False),
        ],
    )
    _add_enum(
        state_options.enum_type,
        "StateConcurrency",
        ["CONCURRENCY_UNSPECIFIED", "CONCURRENCY_FIRST_WRITE", "CONCURRENCY_LAST_WRITE"],
    )
    _add_enum(
        state_options.enum_type,
        "StateConsistency",
        ["CONSISTENCY_UNSPECIFIED", "CONSISTENCY_EVENTUAL", "CONSISTENCY_STRONG"],
    )

    _add_message(
        file_proto.message_type,
        pkg,
        "StateItem",
        fields=[
            ("key", 1, _STRING, None, False),
            ("value", 2, _BYTES, None, False),
            ("etag", 3, _STRING, None, False),
            ("options", 5, _MESSAGE, ".{0}.StateOptions".format(pkg), False),
        ],
        string_maps=[("metadata", 4)],
    )
    return file_proto


def _runtime_file() -> descriptor_pb2.FileDescriptorProto:
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="dapr/proto/runtime/v1/dapr.proto",
        package=RUNTIME_PACKAGE,
        syntax="proto3",
        dependency=[
            "google/protobuf/empty.proto",
            "dapr/proto/common/v1/common.proto",
        ],
    )
    pkg = RUNTIME_PACKAGE
    common = "." + COMMON_PACKAGE
    messages = file_proto.message_type

    _add_message(
        messages,
        pkg,
        "InvokeServiceRequest",
        fields=[
            ("id", 1, _STRING, None, False),
            ("message", 3, _MESSAGE, common + ".InvokeRequest", False),
        ],
    )
    _add_message(
        messages,
        pkg,
        "GetStateRequest",
        fields=[
            ("store_name", 1, _STRING, None, False),
            ("key", 2, _STRING, None, False),
            ("consistency", 3, _ENUM, common + ".StateOptions.StateConsistency", False),
        ],
        string_maps=[("metadata", 4)],
    )
    _add_message(
        messages,
        pkg,
        "GetStateResponse",
        fields=[
            ("data", 1, _BYTES, None, False),
            ("etag", 2, _STRING, None, False),
        ],
        string_maps=[("metadata", 3)],
    )
    _add_message(
        messages,
        pkg,
        "GetBulkStateRequest",
        fields=[
            ("store_name", 1, _STRING, None, False),
            ("keys", 2, _STRING, None, True),
            ("parallelism", 3, _INT32, None, False),
        ],
        string_maps=[("metadata", 4)],
    )
    _add_message(
        messages,
        pkg,
        "BulkStateItem",
        fields=[
            ("key", 1, _STRING, None, False),
            ("data", 2, _BYTES, None, False),
            ("etag", 3, _STRING, None, False),
            ("error", 4, _STRING, None, False),
        ],
        string_maps=[("metadata", 5)],
    )
    _add_message(
        messages,
        pkg,
        "GetBulkStateResponse",
        fields=[("items", 1, _MESSAGE, ".{0}.BulkStateItem".format(pkg), True)],
    )
    _add_message(
        messages,
        pkg,
        "SaveStateRequest",
        fields=[
            ("store_name", 1, _STRING, None, False),
            ("states", 2, _MESSAGE, common + ".StateItem", True),
        ],
    )
    _add_message(
        messages,
        pkg,
        "DeleteStateRequest",
        fields=[
            ("store_name", 1, _STRING, None, False),
            ("key", 2, _STRING, None, False),
            ("etag", 3, _STRING, None, False),
            ("options", 4, _MESSAGE, common + ".StateOptions", False),
        ],
        string_maps=[("metadata", 5)],
    )
    _add_message(
        messages,
        pkg,
        "TransactionalStateOperation",
        fields=[
            ("operationType", 1, _STRING, None, False),
            ("request", 2, _MESSAGE, common + ".StateItem", False),
        ],
    )
    _add_message(
        messages,
        pkg,
        "ExecuteStateTransactionRequest",
        fields=[
            ("storeName", 1, _STRING, None, False),
            (
                "operations",
                2,
                _MESSAGE,
                ".{0}.TransactionalStateOperation".format(pkg),
                True,
            ),
        ],
        string_maps=[("metadata", 3)],
    )
    _add_message(
        messages,
        pkg,
        "PublishEventRequest",
        fields=[
            ("pubsub_name", 1, _STRING, None, False),
            ("topic", 2, _STRING, None, False),
            ("data", 3, _BYTES, None, False),
            ("data_content_type", 4, _STRING, None, False),
        ],
        string_maps=[("metadata", 5)],
    )
    _add_message(
        messages,
        pkg,
        "InvokeBindingRequest",
        fields=[
            ("name", 1, _STRING, None, False),
            ("data", 2, _BYTES, None, False),
            ("operation", 4, _STRING, None, False),
        ],
        string_maps=[("metadata", 3)],
    )
    _add_message(
        messages,
        pkg,
        "InvokeBindingResponse",
        fields=[("data", 1, _BYTES, None, False)],
        string_maps=[("metadata", 2)],
    )
    _add_message(
        messages,
        pkg,
        "GetSecretRequest",
        fields=[
            ("store_name", 1, _STRING, None, False),
            ("key", 2, _STRING, None, False),
        ],
        string_maps=[("metadata", 3)],
    )
    _add_message(
        messages,
        pkg,
        "GetSecretResponse",
        string_maps=[("data", 1)],
    )
    return file_proto


_POOL = descriptor_pool.Default()

# Importing the well-known modules registers their files in the default pool.
_DEPENDENCIES = (any_pb2.DESCRIPTOR, empty_pb2.DESCRIPTOR)

COMMON_DESCRIPTOR = _POOL.AddSerializedFile(_common_file().SerializeToString())
RUNTIME_DESCRIPTOR = _POOL.AddSerializedFile(_runtime_file().SerializeToString())


def _message_class(full_name: str):
    return message_factory.GetMessageClass(_POOL.FindMessageTypeByName(full_name))


HTTPExtension = _message_class(COMMON_PACKAGE + ".HTTPExtension")
InvokeRequest = _message_class(COMMON_PACKAGE + ".InvokeRequest")
InvokeResponse = _message_class(COMMON_PACKAGE + ".InvokeResponse")
StateOptions = _message_class(COMMON_PACKAGE + ".StateOptions")
StateItem = _message_class(COMMON_PACKAGE + ".StateItem")

InvokeServiceRequest = _message_class(RUNTIME_PACKAGE + ".InvokeServiceRequest")
GetStateRequest = _message_class(RUNTIME_PACKAGE + ".GetStateRequest")
GetStateResponse = _message_class(RUNTIME_PACKAGE + ".GetStateResponse")
GetBulkStateRequest = _message_class(RUNTIME_PACKAGE + ".GetBulkStateRequest")
GetBulkStateResponse = _message_class(RUNTIME_PACKAGE + ".GetBulkStateResponse")
BulkStateItem = _message_class(RUNTIME_PACKAGE + ".BulkStateItem")
SaveStateRequest = _message_class(RUNTIME_PACKAGE + ".SaveStateRequest")
DeleteStateRequest = _message_class(RUNTIME_PACKAGE + ".DeleteStateRequest")
TransactionalStateOperation = _message_class(
    RUNTIME_PACKAGE + ".TransactionalStateOperation"
)
ExecuteStateTransactionRequest = _message_class(
    RUNTIME_PACKAGE + ".ExecuteStateTransactionRequest"
)
PublishEventRequest = _message_class(RUNTIME_PACKAGE + ".PublishEventRequest")
InvokeBindingRequest = _message_class(RUNTIME_PACKAGE + ".InvokeBindingRequest")
InvokeBindingResponse = _message_class(RUNTIME_PACKAGE + ".InvokeBindingResponse")
GetSecretRequest = _message_class(RUNTIME_PACKAGE + ".GetSecretRequest")
GetSecretResponse = _message_class(RUNTIME_PACKAGE + ".GetSecretResponse")

Empty = empty_pb2.Empty
Any = any_pb2.Any
