#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
daprlink core module exports (lazy-loaded).
"""

from importlib import import_module
from typing import Any, Dict, Tuple

_EXPORT_MAP: Dict[str, Tuple[str, str]] = {
    "DaprClient": ("daprlink.core.nodes", "DaprClient"),
    "InvocationResolver": ("daprlink.core.invocation", "InvocationResolver"),
    "RichErrorDecoder": ("daprlink.core.invocation", "RichErrorDecoder"),
    "DaprClientConfig": ("daprlink.core.config", "DaprClientConfig"),
    "get_config": ("daprlink.core.config", "get_config"),
    "create_config": ("daprlink.core.config", "create_config"),
    "reset_config": ("daprlink.core.config", "reset_config"),
}

__all__ = sorted(_EXPORT_MAP.keys())


def __getattr__(name: str) -> Any:
    if name not in _EXPORT_MAP:
        raise AttributeError("module 'daprlink.core' has no attribute '{0}'".format(name))

    module_name, attr_name = _EXPORT_MAP[name]
    module = import_module(module_name)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value
