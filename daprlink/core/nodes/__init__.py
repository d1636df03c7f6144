#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Sidecar client node.
"""

from .client import DaprClient

__all__ = ["DaprClient"]
