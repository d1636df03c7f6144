#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Service invocation: resolver, rich error decoding and credentials.
"""

from .credentials import (
    API_TOKEN_ENV_VAR,
    API_TOKEN_HEADER,
    CredentialProvider,
    EnvironmentTokenProvider,
    StaticTokenProvider,
)
from .resolver import HTTP_STATUS_HEADER, InvocationResolver
from .rich_errors import (
    ERROR_INFO_TYPE_NAME,
    GRPC_STATUS_DETAILS_KEY,
    DetailOutcome,
    RichErrorDecoder,
    RichErrorDetails,
)

__all__ = [
    "API_TOKEN_ENV_VAR",
    "API_TOKEN_HEADER",
    "CredentialProvider",
    "DetailOutcome",
    "ERROR_INFO_TYPE_NAME",
    "EnvironmentTokenProvider",
    "GRPC_STATUS_DETAILS_KEY",
    "HTTP_STATUS_HEADER",
    "InvocationResolver",
    "RichErrorDecoder",
    "RichErrorDetails",
    "StaticTokenProvider",
]
