#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Wire data helpers.
"""

from .backends import JSONBackend, SerializationBackend, from_wire_value, to_wire_value

__all__ = ["JSONBackend", "SerializationBackend", "from_wire_value", "to_wire_value"]
