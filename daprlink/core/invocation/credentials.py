#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
API token providers for sidecar authentication.
"""

import os
from typing import Callable, List, Optional, Tuple

API_TOKEN_ENV_VAR = "DAPR_API_TOKEN"
API_TOKEN_HEADER = "dapr-api-token"

CredentialProvider = Callable[[], Optional[str]]


class EnvironmentTokenProvider:
    """
    Reads the token from an environment variable on every call.

    Nothing is cached, so rotating the variable takes effect on the next call.
    """

    def __init__(self, env_var: str = API_TOKEN_ENV_VAR):
        self.env_var = env_var

    def __call__(self) -> Optional[str]:
        return os.environ.get(self.env_var)

    def __repr__(self) -> str:
        return "EnvironmentTokenProvider(env_var={0!r})".format(self.env_var)


class StaticTokenProvider:
    """Always returns the same token (``None`` disables the header)."""

    def __init__(self, token: Optional[str]):
        self._token = token

    def __call__(self) -> Optional[str]:
        return self._token

    def __repr__(self) -> str:
        return "StaticTokenProvider(token={0})".format(
            "<set>" if self._token is not None else None
        )


def credential_metadata(provider: Optional[CredentialProvider]) -> List[Tuple[str, str]]:
    """
    Call metadata carrying the API token, empty when no token is available.
    """
    if provider is None:
        return []
    token = provider()
    if token is None:
        return []
    return [(API_TOKEN_HEADER, token)]
