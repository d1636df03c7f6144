#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Serialization settings shared by payload backends.
"""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class SerializationConfig:
    """
    Options applied when typed payloads are converted to and from JSON.

    ``extended_types`` keeps tuples, sets, complex numbers and bytes intact
    through ``__type__`` markers. Leave it off when the callee is not another
    daprlink application, since the markers are plain JSON objects to anyone
    else.
    """

    ensure_ascii: bool = False
    sort_keys: bool = False
    compact: bool = True
    extended_types: bool = False

    @property
    def separators(self) -> Tuple[str, str]:
        return (",", ":") if self.compact else (", ", ": ")
