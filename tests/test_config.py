#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Tests for server configuration loading.
"""

import pytest

from robotremote.core.config import (
    DEFAULT_TIMEOUT_MS,
    ServerConfig,
    create_config,
)
from robotremote.core.utils.exceptions import ConfigurationError


def test_defaults():
    config = ServerConfig()

    assert config.address == "127.0.0.1:8270"
    assert config.timeout == DEFAULT_TIMEOUT_MS
    assert config.timeout_seconds == 10.0
    assert config.grace_window_seconds == 2.0
    assert config.allow_stop is False


@pytest.mark.parametrize("raw", [None, "", "abc", 0, "0"])
def test_invalid_or_zero_timeout_falls_back_to_default(raw):
    config = ServerConfig.from_options({"timeout": raw})

    assert config.timeout == DEFAULT_TIMEOUT_MS


def test_timeout_accepts_numeric_strings():
    assert ServerConfig.from_options({"timeout": "250"}).timeout == 250


@pytest.mark.parametrize("raw,expected", [(True, True), ("true", False), (1, False), (None, False)])
def test_allow_stop_only_enabled_by_real_true(raw, expected):
    config = ServerConfig.from_options({"allowStop": raw})

    assert config.allow_stop is expected


def test_options_accept_camel_case_and_ignore_unknown_keys():
    config = ServerConfig.from_options(
        {"host": "0.0.0.0", "port": "9000", "graceWindow": 50, "colour": "blue"}
    )

    assert config.address == "0.0.0.0:9000"
    assert config.grace_window == 50


def test_from_env_reads_prefixed_variables():
    config = ServerConfig.from_env(
        {
            "ROBOTREMOTE_PORT": "0",
            "ROBOTREMOTE_ALLOW_STOP": "yes",
            "ROBOTREMOTE_TIMEOUT": "1500",
            "ROBOTREMOTE_LOG_LEVEL": "debug",
            "UNRELATED": "1",
        }
    )

    assert config.port == 0
    assert config.allow_stop is True
    assert config.timeout == 1500
    assert config.log_level == "debug"


def test_create_config_applies_overrides_on_base():
    base = ServerConfig(port=0)

    config = create_config(base, allowStop=True, timeout=0)

    assert config.port == 0
    assert config.allow_stop is True
    assert config.timeout == DEFAULT_TIMEOUT_MS
    assert base.allow_stop is False


@pytest.mark.parametrize(
    "overrides,option",
    [
        ({"port": 70000}, "port"),
        ({"host": ""}, "host"),
        ({"grace_window": -1}, "grace_window"),
        ({"log_level": "chatty"}, "log_level"),
    ],
)
def test_invalid_values_raise_configuration_error(overrides, option):
    with pytest.raises(ConfigurationError) as info:
        ServerConfig(**overrides)

    assert info.value.option == option
