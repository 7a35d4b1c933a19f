#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Discover the example server's keywords and run a few of them.
"""

import asyncio

from robotremote import Client, KeywordProxy


async def main(address: str = "localhost:8270") -> None:
    async with Client(address, timeout=30.0) as client:
        proxy = await KeywordProxy(client).load()
        await proxy.wait_for_metadata()

        for name in proxy.names():
            stub = proxy[name]
            print(f"{name}({', '.join(stub.args)}): {stub.doc}")

        result = await proxy.count_items_in_directory_with_output(".")
        print(result.status.value, result.return_value)
        print(result.output)

        result = await proxy.awful_keyword()
        print(result.status.value, result.error)


if __name__ == "__main__":
    asyncio.run(main())
