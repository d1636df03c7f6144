#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Starlette subscriber receiving pub/sub deliveries as plain JSON.

Serve with any ASGI server, e.g. ``uvicorn subscriber_app:app --port 6002``.
"""

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from daprlink import add_cloud_events


async def subscriptions(request: Request) -> JSONResponse:
    return JSONResponse([{"pubsubname": "pubsub", "topic": "orders", "route": "/orders"}])


async def orders(request: Request) -> JSONResponse:
    # The CloudEvent envelope is already unwrapped here.
    order = await request.json()
    print("received order", order)
    return JSONResponse({"status": "SUCCESS"})


app = Starlette(
    routes=[
        Route("/dapr/subscribe", subscriptions),
        Route("/orders", orders, methods=["POST"]),
    ]
)
add_cloud_events(app)
