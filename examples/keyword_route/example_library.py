#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Example keyword library.

Shows the three keyword shapes the server understands: synchronous bodies,
coroutine bodies, and bodies returning an explicit ``Return`` with log output.
"""

import asyncio
import os

from robotremote import KeywordLogger, Return, keyword


class ExampleLibrary:
    """
    Directory and string keywords.
    """

    async def count_items_in_directory(self, path):
        """Returns the number of items in the directory specified by `path`."""
        items = await asyncio.get_running_loop().run_in_executor(None, os.listdir, path)
        return len(items)

    @keyword(doc="Returns the number of items in the directory specified by `path` with log output.")
    async def count_items_in_directory_with_output(self, path):
        logger = KeywordLogger()
        logger.info("Start to read directory from path[%s].", path)
        items = await asyncio.get_running_loop().run_in_executor(None, os.listdir, path)
        logger.debug("The items: [%s].", ", ".join(sorted(items)))
        return Return(len(items), logger)

    def strings_should_be_equal(self, str1, str2):
        print("Comparing '%s' to '%s'" % (str1, str2))
        if str1 != str2:
            raise AssertionError("Given strings are not equal")

    @keyword(doc="This keyword will cause some terrible thing happen, please use this keyword carefully.")
    def awful_keyword(self):
        logger = KeywordLogger()
        logger.info("Enter awful keyword.")
        logger.warn("Awful thing is going to happen.")
        return Return(
            "Awful return value",
            logger,
            RuntimeError("Error happens because this is an awful keyword"),
        )
