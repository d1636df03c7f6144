#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import logging

import pytest

from daprlink.core.config import (
    DaprClientConfig,
    create_config,
    get_config,
    reset_config,
)
from daprlink.core.invocation.credentials import EnvironmentTokenProvider, credential_metadata
from daprlink.core.utils.logger import ModernLogger, resolve_log_level


def test_defaults_point_at_local_sidecar():
    config = DaprClientConfig()

    assert config.grpc_address == "127.0.0.1:50001"
    assert config.api_token_env_var == "DAPR_API_TOKEN"
    assert config.default_timeout is None
    assert config.serialization.compact is True


def test_from_env_prefers_endpoint_and_strips_scheme():
    config = DaprClientConfig.from_env(
        {
            "DAPR_GRPC_ENDPOINT": "http://sidecar.local:6000",
            "DAPR_GRPC_PORT": "7000",
            "DAPRLINK_LOG_LEVEL": "debug",
            "DAPRLINK_DEFAULT_TIMEOUT": "2.5",
        }
    )

    assert config.grpc_address == "sidecar.local:6000"
    assert config.log_level == "debug"
    assert config.default_timeout == 2.5


def test_from_env_uses_port_when_no_endpoint():
    assert DaprClientConfig.from_env({"DAPR_GRPC_PORT": "7000"}).grpc_address == "127.0.0.1:7000"
    assert DaprClientConfig.from_env({}).grpc_address == "127.0.0.1:50001"


@pytest.mark.parametrize(
    "overrides",
    [
        {"grpc_address": " "},
        {"default_timeout": 0},
        {"log_level": "chatty"},
    ],
)
def test_invalid_settings_are_rejected(overrides):
    with pytest.raises(ValueError):
        create_config(**overrides)


def test_non_positive_env_timeout_is_rejected():
    with pytest.raises(ValueError):
        DaprClientConfig.from_env({"DAPRLINK_DEFAULT_TIMEOUT": "-1"})


def test_get_config_is_cached_until_reset(monkeypatch):
    monkeypatch.setenv("DAPR_GRPC_PORT", "51000")
    monkeypatch.delenv("DAPR_GRPC_ENDPOINT", raising=False)
    monkeypatch.delenv("DAPRLINK_LOG_LEVEL", raising=False)
    monkeypatch.delenv("DAPRLINK_DEFAULT_TIMEOUT", raising=False)
    reset_config()
    try:
        first = get_config()
        assert first.grpc_address == "127.0.0.1:51000"
        assert get_config() is first

        monkeypatch.setenv("DAPR_GRPC_PORT", "52000")
        reset_config()
        assert get_config().grpc_address == "127.0.0.1:52000"
    finally:
        reset_config()


def test_environment_token_is_read_on_every_call(monkeypatch):
    provider = EnvironmentTokenProvider()

    monkeypatch.delenv("DAPR_API_TOKEN", raising=False)
    assert credential_metadata(provider) == []

    monkeypatch.setenv("DAPR_API_TOKEN", "abc")
    assert credential_metadata(provider) == [("dapr-api-token", "abc")]
    assert credential_metadata(None) == []


def test_logger_mixin_applies_named_level(caplog):
    class Component(ModernLogger):
        def __init__(self):
            ModernLogger.__init__(self, name="daprlink.tests.component", level="warning")

    component = Component()

    with caplog.at_level(logging.DEBUG, logger="daprlink.tests.component"):
        component.warning("sidecar %s unreachable", "127.0.0.1:50001")

    assert "sidecar 127.0.0.1:50001 unreachable" in caplog.text
    assert resolve_log_level("INFO") == logging.INFO
    with pytest.raises(ValueError):
        resolve_log_level("loud")
