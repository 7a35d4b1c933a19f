#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Remote keyword protocol: method names, result envelope, dispatcher.
"""

from .dispatcher import KeywordDispatcher
from .models import (
    TIMEOUT_ERROR_MESSAGE,
    KeywordResult,
    KeywordStatus,
    ProtocolMethod,
)
from .runtime import KeywordRuntime

__all__ = [
    "KeywordDispatcher",
    "KeywordResult",
    "KeywordRuntime",
    "KeywordStatus",
    "ProtocolMethod",
    "TIMEOUT_ERROR_MESSAGE",
]
