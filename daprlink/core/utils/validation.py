#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Argument checks performed before any sidecar call is attempted.
"""

from typing import Any, Sized

from .exceptions import ValidationError


def require_not_empty(value: Any, name: str) -> str:
    """
    Reject ``None``, non-strings and blank strings.
    """
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(
            message="Argument '{0}' must be a non-empty string".format(name),
            argument=name,
        )
    return value


def require_not_none(value: Any, name: str) -> Any:
    if value is None:
        raise ValidationError(
            message="Argument '{0}' must not be None".format(name),
            argument=name,
        )
    return value


def require_items(values: Sized, name: str) -> Sized:
    require_not_none(values, name)
    if len(values) == 0:
        raise ValidationError(
            message="{0} does not contain any elements".format(name),
            argument=name,
        )
    return values
