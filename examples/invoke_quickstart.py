#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Invoke another application and keep its answer in a state store.

Run next to a sidecar (``dapr run --app-id checkout -- python invoke_quickstart.py``)
with an ``orders`` application and a ``statestore`` component available.
"""

import asyncio

from daprlink import DaprClient, HTTPExtension, RemoteApplicationError


async def main() -> None:
    async with DaprClient() as client:
        try:
            order = await client.invoke_method(
                "orders",
                "orders/42",
                http_extension=HTTPExtension(verb="GET", query_string={"expand": "items"}),
            )
        except RemoteApplicationError as exc:
            print("orders answered HTTP {0}: {1}".format(
                exc.status.http_status_code, exc.status.http_error_message
            ))
            return

        await client.save_state("statestore", "order-42", order)
        value, etag = await client.get_state_and_etag("statestore", "order-42")
        print("stored", value, "etag", etag)

        await client.publish_event("pubsub", "orders", {"id": 42, "status": "stored"})


if __name__ == "__main__":
    asyncio.run(main())
