#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Payload backends and call models.
"""

from .backends import JSONBackend, RawBytesBackend, SerializationBackend
from .config import SerializationConfig
from .models import (
    CONTENT_TYPE_GRPC,
    CONTENT_TYPE_JSON,
    BodyKind,
    BulkStateItem,
    CompositeStatus,
    ConcurrencyMode,
    ConsistencyMode,
    HTTPExtension,
    HTTPVerb,
    InvocationRequest,
    InvocationResponse,
    OperationResult,
    StateOperationType,
    StateOptions,
    StateTransactionRequest,
    status_code_from_number,
)

__all__ = [
    "CONTENT_TYPE_GRPC",
    "CONTENT_TYPE_JSON",
    "BodyKind",
    "BulkStateItem",
    "CompositeStatus",
    "ConcurrencyMode",
    "ConsistencyMode",
    "HTTPExtension",
    "HTTPVerb",
    "InvocationRequest",
    "InvocationResponse",
    "JSONBackend",
    "OperationResult",
    "RawBytesBackend",
    "SerializationBackend",
    "SerializationConfig",
    "StateOperationType",
    "StateOptions",
    "StateTransactionRequest",
    "status_code_from_number",
]
