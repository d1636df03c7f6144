#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Utility exports for daprlink core.
"""

from .logger import ModernLogger, resolve_log_level
from .exceptions import (
    DaprLinkError,
    EnvelopeParseError,
    ExceptionTranslator,
    InvocationCancelledError,
    InvocationError,
    PayloadError,
    ProtocolError,
    RemoteApplicationError,
    SerializationError,
    TransportFailure,
    UnsupportedOperationError,
    ValidationError,
)

__all__ = [
    "ModernLogger",
    "resolve_log_level",
    "DaprLinkError",
    "EnvelopeParseError",
    "ExceptionTranslator",
    "InvocationCancelledError",
    "InvocationError",
    "PayloadError",
    "ProtocolError",
    "RemoteApplicationError",
    "SerializationError",
    "TransportFailure",
    "UnsupportedOperationError",
    "ValidationError",
]
