#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
robotremote public API with lazy imports.

Keyword authors only need ``Return``, ``KeywordLogger`` and ``keyword``;
importing them does not pull in gRPC. The server, client and proxy load the
transport on first access.
"""

from importlib import import_module
from typing import Any, Dict, Tuple

from ._version import __version__

_EXPORT_MAP: Dict[str, Tuple[str, str]] = {
    "Server": ("robotremote.core.nodes", "KeywordServer"),
    "Client": ("robotremote.core.nodes", "RemoteKeywordClient"),
    "KeywordServer": ("robotremote.core.nodes", "KeywordServer"),
    "RemoteKeywordClient": ("robotremote.core.nodes", "RemoteKeywordClient"),
    "KeywordService": ("robotremote.core.service", "KeywordService"),
    "ServerConfig": ("robotremote.core.config", "ServerConfig"),
    "KeywordProxy": ("robotremote.proxy", "KeywordProxy"),
    "KeywordDispatcher": ("robotremote.protocols", "KeywordDispatcher"),
    "KeywordResult": ("robotremote.protocols", "KeywordResult"),
    "KeywordStatus": ("robotremote.protocols", "KeywordStatus"),
    "KeywordLogger": ("robotremote.keyword_logger", "KeywordLogger"),
    "Logger": ("robotremote.keyword_logger", "KeywordLogger"),
    "Return": ("robotremote.keywords", "Return"),
    "keyword": ("robotremote.keywords", "keyword"),
    "Value": ("robotremote.keywords", "Value"),
    "Failure": ("robotremote.keywords", "Failure"),
    "Deferred": ("robotremote.keywords", "Deferred"),
}

__all__ = ["__version__", *sorted(_EXPORT_MAP.keys())]


def __getattr__(name: str) -> Any:
    """
    Resolve public API symbols lazily.
    """
    if name not in _EXPORT_MAP:
        raise AttributeError("module 'robotremote' has no attribute '{0}'".format(name))

    module_name, attr_name = _EXPORT_MAP[name]
    module = import_module(module_name)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value
