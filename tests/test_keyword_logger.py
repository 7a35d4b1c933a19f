#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Tests for the per-invocation keyword logger.
"""

import re

from robotremote.keyword_logger import KeywordLogger, format_message
from robotremote.keywords import Return


def _fixed_clock():
    return 1700000000.123


def test_each_level_appends_one_marked_line():
    logger = KeywordLogger(clock=_fixed_clock)

    logger.trace("t")
    logger.debug("d")
    logger.info("i")
    logger.warn("w")
    logger.fail("f")
    logger.html("<b>h</b>")

    assert logger.get_message() == (
        "*TRACE:1700000000123* t\n"
        "*DEBUG:1700000000123* d\n"
        "*INFO:1700000000123* i\n"
        "*WARN:1700000000123* w\n"
        "*FAIL:1700000000123* f\n"
        "*HTML:1700000000123* <b>h</b>\n"
    )
    assert len(logger) == 6


def test_printf_style_formatting():
    logger = KeywordLogger()
    logger.info("Start to read directory from path[%s].", "/tmp")

    assert re.fullmatch(
        r"\*INFO:\d+\* Start to read directory from path\[/tmp\]\.\n",
        logger.get_message(),
    )


def test_surplus_arguments_are_appended():
    assert format_message("count %d", 3, "extra") == "count 3 extra"
    assert format_message("no placeholders", 1, 2) == "no placeholders 1 2"
    assert format_message("plain") == "plain"


def test_fresh_logger_is_empty_and_loggers_do_not_share_lines():
    first = KeywordLogger()
    second = KeywordLogger()
    first.info("only in first")

    assert second.get_message() == ""
    assert "only in first" in first.get_message()


def test_return_reads_logger_output():
    logger = KeywordLogger(clock=_fixed_clock)
    logger.warn("careful")

    wrapped = Return(7, logger)

    assert wrapped.output == "*WARN:1700000000123* careful\n"
    assert wrapped.return_value == 7
    assert wrapped.error is None
