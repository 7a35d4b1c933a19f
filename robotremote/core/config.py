#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Server configuration for the remote keyword server.

Configuration can be assembled three ways:

- keyword arguments: ``create_config(port=8270, allow_stop=True)``
- a loose options mapping (camelCase keys accepted): ``ServerConfig.from_options``
- environment variables prefixed with ``ROBOTREMOTE_``: ``ServerConfig.from_env``

Durations (``timeout``, ``grace_window``) are expressed in milliseconds, the
unit the remote protocol documents; ``*_seconds`` properties convert for
asyncio.
"""

import os
import threading
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional

from .utils.exceptions import ConfigurationError
from .utils.logger import resolve_level

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8270
DEFAULT_TIMEOUT_MS = 10000
DEFAULT_GRACE_WINDOW_MS = 2000
ENV_PREFIX = "ROBOTREMOTE_"

_TRUE_STRINGS = {"1", "true", "yes", "on"}

# camelCase option names used by remote-server launchers
_OPTION_ALIASES: Dict[str, str] = {
    "allowStop": "allow_stop",
    "graceWindow": "grace_window",
    "cancelOnTimeout": "cancel_on_timeout",
    "logLevel": "log_level",
}


def _parse_timeout(value: Any) -> int:
    """
    Parse a millisecond timeout; missing, invalid or zero falls back to default.
    """
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return DEFAULT_TIMEOUT_MS
    return parsed or DEFAULT_TIMEOUT_MS


def _parse_flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return False


@dataclass(frozen=True)
class ServerConfig:
    """
    Recognized server options.

    Attributes:
        host: Bind address
        port: Bind port; 0 lets the OS pick a free port
        timeout: Per-invocation timeout in milliseconds
        allow_stop: Whether ``stop_remote_server`` is honored
        grace_window: Delay in milliseconds between shutdown request and
            forced process termination
        cancel_on_timeout: Cancel a timed-out asynchronous keyword body
            instead of abandoning it
        log_level: Logging level name for server components
    """

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    timeout: int = DEFAULT_TIMEOUT_MS
    allow_stop: bool = False
    grace_window: int = DEFAULT_GRACE_WINDOW_MS
    cancel_on_timeout: bool = False
    log_level: str = "info"

    def __post_init__(self) -> None:
        if not isinstance(self.host, str) or not self.host.strip():
            raise ConfigurationError("host must be a non-empty string", option="host", value=self.host)
        if not isinstance(self.port, int) or not 0 <= self.port <= 65535:
            raise ConfigurationError("port must be in the range 0-65535", option="port", value=self.port)
        if not isinstance(self.timeout, int) or self.timeout <= 0:
            raise ConfigurationError("timeout must be a positive number of milliseconds", option="timeout", value=self.timeout)
        if not isinstance(self.grace_window, int) or self.grace_window < 0:
            raise ConfigurationError("grace_window must be a non-negative number of milliseconds", option="grace_window", value=self.grace_window)
        try:
            resolve_level(self.log_level)
        except ValueError as e:
            raise ConfigurationError(str(e), option="log_level", value=self.log_level) from e

    @property
    def timeout_seconds(self) -> float:
        return self.timeout / 1000.0

    @property
    def grace_window_seconds(self) -> float:
        return self.grace_window / 1000.0

    @property
    def address(self) -> str:
        return "{0}:{1}".format(self.host, self.port)

    def with_overrides(self, **overrides: Any) -> "ServerConfig":
        return replace(self, **overrides)

    @classmethod
    def from_options(cls, options: Optional[Mapping[str, Any]] = None) -> "ServerConfig":
        """
        Build a config from a loose options mapping.

        Unknown keys are ignored. ``allow_stop`` is only enabled by a real
        ``True`` value, not by arbitrary truthy objects.
        """
        if not options:
            return cls()

        known = {f.name for f in fields(cls)}
        values: Dict[str, Any] = {}
        for key, value in options.items():
            name = _OPTION_ALIASES.get(key, key)
            if name in known:
                values[name] = value

        if "timeout" in values:
            values["timeout"] = _parse_timeout(values["timeout"])
        if "allow_stop" in values:
            values["allow_stop"] = values["allow_stop"] is True
        if "cancel_on_timeout" in values:
            values["cancel_on_timeout"] = values["cancel_on_timeout"] is True
        if "port" in values:
            try:
                values["port"] = int(values["port"])
            except (TypeError, ValueError) as e:
                raise ConfigurationError("port must be an integer", option="port", value=values["port"]) from e
        if "grace_window" in values:
            try:
                values["grace_window"] = int(values["grace_window"])
            except (TypeError, ValueError) as e:
                raise ConfigurationError("grace_window must be an integer", option="grace_window", value=values["grace_window"]) from e
        return cls(**values)

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        prefix: str = ENV_PREFIX,
    ) -> "ServerConfig":
        """
        Build a config from ``ROBOTREMOTE_*`` environment variables.
        """
        env = os.environ if environ is None else environ
        options: Dict[str, Any] = {}
        for f in fields(cls):
            raw = env.get(prefix + f.name.upper())
            if raw is None:
                continue
            if f.name in {"allow_stop", "cancel_on_timeout"}:
                options[f.name] = _parse_flag(raw)
            else:
                options[f.name] = raw
        return cls.from_options(options)


_config_lock = threading.Lock()
_global_config: Optional[ServerConfig] = None


def get_config() -> ServerConfig:
    """
    Process-wide config, loaded from the environment on first use.
    """
    global _global_config
    with _config_lock:
        if _global_config is None:
            _global_config = ServerConfig.from_env()
        return _global_config


def create_config(base: Optional[ServerConfig] = None, **overrides: Any) -> ServerConfig:
    """
    Derive a config from ``base`` (defaults when omitted) with overrides applied.
    """
    options: Dict[str, Any] = {}
    for key, value in overrides.items():
        options[_OPTION_ALIASES.get(key, key)] = value
    if "timeout" in options:
        options["timeout"] = _parse_timeout(options["timeout"])
    return (base or ServerConfig()).with_overrides(**options)


__all__ = [
    "ServerConfig",
    "get_config",
    "create_config",
    "DEFAULT_TIMEOUT_MS",
    "DEFAULT_GRACE_WINDOW_MS",
]
