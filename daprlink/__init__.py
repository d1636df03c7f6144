#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
daprlink public API with lazy imports.

gRPC, protobuf and Starlette are only imported once the corresponding API
objects are requested.
"""

from importlib import import_module
from typing import Any, Dict, Tuple

from ._version import __version__

_EXPORT_MAP: Dict[str, Tuple[str, str]] = {
    "DaprClient": ("daprlink.core.nodes", "DaprClient"),
    "DaprClientConfig": ("daprlink.core.config", "DaprClientConfig"),
    "get_config": ("daprlink.core.config", "get_config"),
    "InvocationResolver": ("daprlink.core.invocation", "InvocationResolver"),
    "RichErrorDecoder": ("daprlink.core.invocation", "RichErrorDecoder"),
    "DetailOutcome": ("daprlink.core.invocation", "DetailOutcome"),
    "EnvironmentTokenProvider": ("daprlink.core.invocation", "EnvironmentTokenProvider"),
    "StaticTokenProvider": ("daprlink.core.invocation", "StaticTokenProvider"),
    "HTTPVerb": ("daprlink.core.data", "HTTPVerb"),
    "HTTPExtension": ("daprlink.core.data", "HTTPExtension"),
    "InvocationRequest": ("daprlink.core.data", "InvocationRequest"),
    "InvocationResponse": ("daprlink.core.data", "InvocationResponse"),
    "CompositeStatus": ("daprlink.core.data", "CompositeStatus"),
    "BodyKind": ("daprlink.core.data", "BodyKind"),
    "StateOptions": ("daprlink.core.data", "StateOptions"),
    "StateTransactionRequest": ("daprlink.core.data", "StateTransactionRequest"),
    "OperationResult": ("daprlink.core.data", "OperationResult"),
    "DaprLinkError": ("daprlink.core.utils", "DaprLinkError"),
    "InvocationError": ("daprlink.core.utils", "InvocationError"),
    "RemoteApplicationError": ("daprlink.core.utils", "RemoteApplicationError"),
    "PayloadError": ("daprlink.core.utils", "PayloadError"),
    "TransportFailure": ("daprlink.core.utils", "TransportFailure"),
    "ValidationError": ("daprlink.core.utils", "ValidationError"),
    "CloudEventsMiddleware": ("daprlink.middleware", "CloudEventsMiddleware"),
    "CloudEventNormalizer": ("daprlink.middleware", "CloudEventNormalizer"),
    "add_cloud_events": ("daprlink.middleware", "add_cloud_events"),
}

__all__ = ["__version__", *sorted(_EXPORT_MAP.keys())]


def __getattr__(name: str) -> Any:
    """
    Resolve public API symbols lazily.
    """
    if name not in _EXPORT_MAP:
        raise AttributeError("module 'daprlink' has no attribute '{0}'".format(name))

    module_name, attr_name = _EXPORT_MAP[name]
    module = import_module(module_name)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value
