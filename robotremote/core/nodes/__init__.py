#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
gRPC transport nodes: keyword server and client.
"""

from .server import KeywordServer, ServerState
from .client import RemoteKeywordClient

# Short aliases used by examples and launchers
Server = KeywordServer
Client = RemoteKeywordClient

__all__ = ["KeywordServer", "RemoteKeywordClient", "ServerState", "Server", "Client"]
