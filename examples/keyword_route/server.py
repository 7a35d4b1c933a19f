#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Serve the example library on port 8270.
"""

from example_library import ExampleLibrary

from robotremote import Server


class RemoteLibraryApplication:
    """
    Minimal server application wrapper.
    """

    def __init__(self, host: str = "localhost", port: int = 8270) -> None:
        self._server = Server([ExampleLibrary()], host=host, port=port, allow_stop=True)

    def run(self) -> None:
        self._server.start()


if __name__ == "__main__":
    RemoteLibraryApplication().run()
