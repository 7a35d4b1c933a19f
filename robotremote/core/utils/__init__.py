#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Utility exports for robotremote core.
"""

from .logger import ModernLogger
from .exceptions import *  # noqa: F401,F403
from .exceptions import ExceptionFormatter, ExceptionTranslator
from .concurrency import SingleDeliveryGuard, create_loop_future

# Common formatter shortcuts
format_exception = ExceptionFormatter.format_exception
format_exception_chain = ExceptionFormatter.format_exception_chain
format_exception_summary = ExceptionFormatter.format_exception_summary

__all__ = [
    "ModernLogger",
    "ExceptionFormatter",
    "ExceptionTranslator",
    "SingleDeliveryGuard",
    "create_loop_future",
    "format_exception",
    "format_exception_chain",
    "format_exception_summary",
]
