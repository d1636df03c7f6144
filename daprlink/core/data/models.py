#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Domain models for sidecar calls.

This module defines the request/response shapes of service invocation and
the value objects used by the state, secret, pub/sub and binding operations.
All of them are created per call and never shared between calls.
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union

import grpc

from ..utils.exceptions import InvocationError, UnsupportedOperationError

CONTENT_TYPE_JSON = "application/json"
CONTENT_TYPE_GRPC = "application/grpc"

_STATUS_CODES_BY_NUMBER: Dict[int, grpc.StatusCode] = {
    int(code.value[0]): code for code in grpc.StatusCode
}


def status_code_from_number(number: int) -> grpc.StatusCode:
    """
    Map a numeric gRPC status onto ``grpc.StatusCode`` (UNKNOWN when unmapped).
    """
    return _STATUS_CODES_BY_NUMBER.get(int(number), grpc.StatusCode.UNKNOWN)


class HTTPVerb(Enum):
    """
    HTTP verbs the sidecar can forward to an HTTP callee.

    Values match the wire enum of ``HTTPExtension.Verb``.
    """

    GET = 1
    HEAD = 2
    POST = 3
    PUT = 4
    DELETE = 5
    CONNECT = 6
    OPTIONS = 7
    TRACE = 8

    @classmethod
    def parse(cls, value: Union["HTTPVerb", str]) -> "HTTPVerb":
        """
        Accept an enum member or a verb name in any case.
        """
        if isinstance(value, cls):
            return value
        name = str(value).strip().upper()
        if name not in cls.__members__:
            raise UnsupportedOperationError(
                message="Service invocation with verb '{0}' is not supported".format(value)
            )
        return cls[name]


class BodyKind(Enum):
    """
    How invocation payloads are carried.

    ``TYPED`` runs bodies through the structured serializer, ``RAW`` moves
    bytes verbatim in both directions.
    """

    TYPED = "typed"
    RAW = "raw"


@dataclass(frozen=True)
class HTTPExtension:
    """
    HTTP-shaped options for calling an HTTP callee through the sidecar.
    """

    verb: Union[HTTPVerb, str] = HTTPVerb.POST
    query_string: Mapping[str, str] = field(default_factory=dict)
    headers: Mapping[str, str] = field(default_factory=dict)
    content_type: Optional[str] = None


@dataclass(frozen=True)
class InvocationRequest:
    """
    One service invocation.

    ``cancel_event`` is the cancellation signal: setting it aborts the
    in-flight call.
    """

    app_id: str
    method_name: str
    body: Any = None
    http_extension: Optional[HTTPExtension] = None
    body_kind: BodyKind = BodyKind.TYPED
    timeout: Optional[float] = None
    cancel_event: Optional[asyncio.Event] = field(default=None, compare=False)


@dataclass(frozen=True)
class CompositeStatus:
    """
    gRPC status of a call, optionally enriched with the HTTP outcome the
    sidecar reported in a ``google.rpc.ErrorInfo`` detail.
    """

    code: grpc.StatusCode
    message: str = ""
    http_status_code: Optional[int] = None
    http_error_message: Optional[str] = None

    @property
    def has_http_status(self) -> bool:
        return self.http_status_code is not None


@dataclass
class InvocationResponse:
    """
    Normalized result of a service invocation.

    Exactly one of ``http_status_code`` and ``grpc_status`` is populated: the
    former when the callee answered over HTTP, the latter when it is a native
    gRPC application.
    """

    request: InvocationRequest
    body: Any = None
    headers: Dict[str, bytes] = field(default_factory=dict)
    trailers: Dict[str, bytes] = field(default_factory=dict)
    content_type: str = CONTENT_TYPE_JSON
    http_status_code: Optional[int] = None
    grpc_status: Optional[CompositeStatus] = None

    def __post_init__(self) -> None:
        if (self.http_status_code is None) == (self.grpc_status is None):
            raise ValueError(
                "InvocationResponse requires exactly one of http_status_code or grpc_status"
            )

    @property
    def is_http(self) -> bool:
        return self.http_status_code is not None


class ConsistencyMode(Enum):
    """State read/write consistency."""

    EVENTUAL = 1
    STRONG = 2


class ConcurrencyMode(Enum):
    """State write concurrency."""

    FIRST_WRITE = 1
    LAST_WRITE = 2


@dataclass(frozen=True)
class StateOptions:
    consistency: Optional[ConsistencyMode] = None
    concurrency: Optional[ConcurrencyMode] = None


class StateOperationType(Enum):
    UPSERT = "upsert"
    DELETE = "delete"


@dataclass(frozen=True)
class StateTransactionRequest:
    """
    One operation inside a state transaction. ``value`` is already encoded.
    """

    key: str
    value: Optional[bytes] = None
    operation_type: StateOperationType = StateOperationType.UPSERT
    etag: Optional[str] = None
    metadata: Optional[Mapping[str, str]] = None
    options: Optional[StateOptions] = None


@dataclass(frozen=True)
class BulkStateItem:
    key: str
    value: str
    etag: str
    error: str = ""


@dataclass(frozen=True)
class OperationResult:
    """
    Outcome of a best-effort operation.

    Truthy on success. On failure ``error`` keeps the invocation error that
    was discarded, so callers can tell a transport problem from a conflict.
    """

    succeeded: bool
    error: Optional[InvocationError] = None

    @classmethod
    def ok(cls) -> "OperationResult":
        return cls(succeeded=True)

    @classmethod
    def failed(cls, error: InvocationError) -> "OperationResult":
        return cls(succeeded=False, error=error)

    def __bool__(self) -> bool:
        return self.succeeded
