#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
robotremote core module exports (lazy-loaded).
"""

from importlib import import_module
from typing import Any, Dict, Tuple

_EXPORT_MAP: Dict[str, Tuple[str, str]] = {
    "Keyword": ("robotremote.core.registry", "Keyword"),
    "KeywordRegistry": ("robotremote.core.registry", "KeywordRegistry"),
    "ExecutionEngine": ("robotremote.core.engine", "ExecutionEngine"),
    "LifecycleController": ("robotremote.core.lifecycle", "LifecycleController"),
    "SignalWatcher": ("robotremote.core.lifecycle", "SignalWatcher"),
    "KeywordService": ("robotremote.core.service", "KeywordService"),
    "KeywordServer": ("robotremote.core.nodes", "KeywordServer"),
    "RemoteKeywordClient": ("robotremote.core.nodes", "RemoteKeywordClient"),
    "ServerConfig": ("robotremote.core.config", "ServerConfig"),
    "get_config": ("robotremote.core.config", "get_config"),
    "create_config": ("robotremote.core.config", "create_config"),
}

__all__ = sorted(_EXPORT_MAP.keys())


def __getattr__(name: str) -> Any:
    if name not in _EXPORT_MAP:
        raise AttributeError("module 'robotremote.core' has no attribute '{0}'".format(name))

    module_name, attr_name = _EXPORT_MAP[name]
    module = import_module(module_name)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value
