#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
ASGI middleware for applications called by the sidecar.
"""

from .cloudevents import (
    CLOUD_EVENT_CONTENT_TYPE,
    CloudEventNormalizer,
    CloudEventsMiddleware,
    add_cloud_events,
    parse_content_type,
    parse_envelope,
    resolve_charset,
)

__all__ = [
    "CLOUD_EVENT_CONTENT_TYPE",
    "CloudEventNormalizer",
    "CloudEventsMiddleware",
    "add_cloud_events",
    "parse_content_type",
    "parse_envelope",
    "resolve_charset",
]
