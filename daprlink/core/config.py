#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Client configuration.

Values come from keyword arguments or from the environment variables the
sidecar injects into application processes.
"""

import os
import threading
from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Optional

from .data.config import SerializationConfig
from .invocation.credentials import API_TOKEN_ENV_VAR
from .utils.logger import resolve_log_level

DEFAULT_GRPC_HOST = "127.0.0.1"
DEFAULT_GRPC_PORT = 50001


def _default_timeout_from(value: Optional[str]) -> Optional[float]:
    if value is None or not value.strip():
        return None
    timeout = float(value)
    if timeout <= 0:
        raise ValueError("DAPRLINK_DEFAULT_TIMEOUT must be positive, got {0}".format(value))
    return timeout


@dataclass(frozen=True)
class DaprClientConfig:
    """
    Settings used by ``DaprClient``.

    Attributes:
        grpc_address: ``host:port`` of the sidecar gRPC endpoint
        api_token_env_var: Environment variable holding the API token
        log_level: Level name applied to daprlink loggers, ``None`` to inherit
        default_timeout: Deadline in seconds for calls that set none
        serialization: JSON options for typed payloads
    """

    grpc_address: str = "{0}:{1}".format(DEFAULT_GRPC_HOST, DEFAULT_GRPC_PORT)
    api_token_env_var: str = API_TOKEN_ENV_VAR
    log_level: Optional[str] = None
    default_timeout: Optional[float] = None
    serialization: SerializationConfig = field(default_factory=SerializationConfig)

    def __post_init__(self) -> None:
        if not self.grpc_address or not self.grpc_address.strip():
            raise ValueError("grpc_address must not be empty")
        if self.default_timeout is not None and self.default_timeout <= 0:
            raise ValueError("default_timeout must be positive")
        resolve_log_level(self.log_level)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "DaprClientConfig":
        """
        Build a config from ``DAPR_GRPC_ENDPOINT``, ``DAPR_GRPC_PORT``,
        ``DAPRLINK_LOG_LEVEL`` and ``DAPRLINK_DEFAULT_TIMEOUT``.
        """
        env = os.environ if environ is None else environ

        endpoint = env.get("DAPR_GRPC_ENDPOINT")
        if endpoint:
            address = endpoint.split("://", 1)[-1]
        else:
            port = int(env.get("DAPR_GRPC_PORT") or DEFAULT_GRPC_PORT)
            address = "{0}:{1}".format(DEFAULT_GRPC_HOST, port)

        return cls(
            grpc_address=address,
            log_level=env.get("DAPRLINK_LOG_LEVEL") or None,
            default_timeout=_default_timeout_from(env.get("DAPRLINK_DEFAULT_TIMEOUT")),
        )


_config_lock = threading.Lock()
_config: Optional[DaprClientConfig] = None


def get_config() -> DaprClientConfig:
    """
    Process-wide configuration, loaded from the environment on first use.
    """
    global _config

    if _config is None:
        with _config_lock:
            if _config is None:
                _config = DaprClientConfig.from_env()
    return _config


def create_config(base: Optional[DaprClientConfig] = None, **overrides: Any) -> DaprClientConfig:
    """
    New configuration derived from ``base`` (defaults when omitted).
    """
    return replace(base or DaprClientConfig(), **overrides)


def reset_config() -> None:
    global _config

    with _config_lock:
        _config = None
