#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Tests for DaprClient state, secret, pub/sub and binding operations.
"""

import asyncio

import grpc
import pytest

from daprlink.core.config import DaprClientConfig
from daprlink.core.data.models import (
    ConcurrencyMode,
    ConsistencyMode,
    StateOperationType,
    StateOptions,
    StateTransactionRequest,
)
from daprlink.core.invocation.credentials import StaticTokenProvider
from daprlink.core.nodes.client import DaprClient
from daprlink.core.protos import dapr_pb2
from daprlink.core.utils.exceptions import PayloadError, TransportFailure, ValidationError

from fake_sidecar import RecordingServicer, running_sidecar


class StateStoreServicer(RecordingServicer):
    def __init__(self):
        super().__init__()
        self.store = {"order-1": (b'{"qty":3}', "1")}

    async def GetState(self, request, context):
        self.record(request, context)
        data, etag = self.store.get(request.key, (b"", ""))
        return dapr_pb2.GetStateResponse(data=data, etag=etag)

    async def GetBulkState(self, request, context):
        self.record(request, context)
        response = dapr_pb2.GetBulkStateResponse()
        for key in request.keys:
            if key in self.store:
                data, etag = self.store[key]
                response.items.append(dapr_pb2.BulkStateItem(key=key, data=data, etag=etag))
            else:
                response.items.append(dapr_pb2.BulkStateItem(key=key, error="not found"))
        return response

    async def SaveState(self, request, context):
        self.record(request, context)
        for item in request.states:
            current = self.store.get(item.key)
            if item.etag and current is not None and current[1] != item.etag:
                await context.abort(grpc.StatusCode.ABORTED, "etag mismatch")
            self.store[item.key] = (item.value, str(int(current[1]) + 1 if current else 1))
        return dapr_pb2.Empty()

    async def DeleteState(self, request, context):
        self.record(request, context)
        current = self.store.get(request.key)
        if request.etag and current is not None and current[1] != request.etag:
            await context.abort(grpc.StatusCode.ABORTED, "etag mismatch")
        self.store.pop(request.key, None)
        return dapr_pb2.Empty()

    async def ExecuteStateTransaction(self, request, context):
        self.record(request, context)
        return dapr_pb2.Empty()

    async def PublishEvent(self, request, context):
        self.record(request, context)
        return dapr_pb2.Empty()

    async def InvokeBinding(self, request, context):
        self.record(request, context)
        return dapr_pb2.InvokeBindingResponse(data=b'{"sent":true}')

    async def GetSecret(self, request, context):
        self.record(request, context)
        return dapr_pb2.GetSecretResponse(data={"password": "hunter2"})

    async def InvokeService(self, request, context):
        self.record(request, context)
        response = dapr_pb2.InvokeResponse()
        response.data.value = request.message.data.value
        return response


def _client(channel):
    return DaprClient(
        config=DaprClientConfig(),
        channel=channel,
        credential_provider=StaticTokenProvider("token-1"),
    )


def test_get_state_decodes_value_and_etag():
    servicer = StateStoreServicer()

    async def run_case():
        async with running_sidecar(servicer) as channel:
            client = _client(channel)
            value, etag = await client.get_state_and_etag(
                "statestore", "order-1", consistency=ConsistencyMode.STRONG
            )
            missing = await client.get_state("statestore", "order-2")

        assert value == {"qty": 3}
        assert etag == "1"
        assert missing is None
        assert servicer.requests[0].consistency == ConsistencyMode.STRONG.value
        assert servicer.metadata[0]["dapr-api-token"] == "token-1"

    asyncio.run(run_case())


def test_get_bulk_state_returns_text_values_and_errors():
    servicer = StateStoreServicer()

    async def run_case():
        async with running_sidecar(servicer) as channel:
            items = await _client(channel).get_bulk_state(
                "statestore", ["order-1", "order-9"], parallelism=2
            )

        assert [item.key for item in items] == ["order-1", "order-9"]
        assert items[0].value == '{"qty":3}'
        assert items[0].etag == "1"
        assert items[1].error == "not found"
        assert servicer.requests[0].parallelism == 2

    asyncio.run(run_case())


def test_save_state_serializes_value_with_options():
    servicer = StateStoreServicer()
    options = StateOptions(
        consistency=ConsistencyMode.EVENTUAL, concurrency=ConcurrencyMode.FIRST_WRITE
    )

    async def run_case():
        async with running_sidecar(servicer) as channel:
            await _client(channel).save_state(
                "statestore", "order-2", {"qty": 1}, state_options=options,
                metadata={"ttlInSeconds": "60"},
            )

        item = servicer.requests[0].states[0]
        assert servicer.requests[0].store_name == "statestore"
        assert item.key == "order-2"
        assert item.value == b'{"qty":1}'
        assert item.etag == ""
        assert item.options.consistency == ConsistencyMode.EVENTUAL.value
        assert item.options.concurrency == ConcurrencyMode.FIRST_WRITE.value
        assert dict(item.metadata) == {"ttlInSeconds": "60"}

    asyncio.run(run_case())


def test_try_save_state_reports_conflict_instead_of_raising():
    servicer = StateStoreServicer()

    async def run_case():
        async with running_sidecar(servicer) as channel:
            client = _client(channel)
            stale = await client.try_save_state("statestore", "order-1", {"qty": 5}, "7")
            fresh = await client.try_save_state("statestore", "order-1", {"qty": 5}, "1")

        assert not stale
        assert isinstance(stale.error, TransportFailure)
        assert stale.error.__cause__.code() is grpc.StatusCode.ABORTED
        assert fresh
        assert fresh.error is None
        assert servicer.store["order-1"][0] == b'{"qty":5}'

    asyncio.run(run_case())


def test_delete_and_try_delete_state():
    servicer = StateStoreServicer()
    servicer.store["order-2"] = (b"{}", "4")

    async def run_case():
        async with running_sidecar(servicer) as channel:
            client = _client(channel)
            await client.delete_state("statestore", "order-1")
            rejected = await client.try_delete_state("statestore", "order-2", "3")
            accepted = await client.try_delete_state("statestore", "order-2", "4")

        assert "order-1" not in servicer.store
        assert not rejected
        assert accepted
        assert "order-2" not in servicer.store

    asyncio.run(run_case())


def test_execute_state_transaction_maps_operations():
    servicer = StateStoreServicer()
    operations = [
        StateTransactionRequest(
            key="a", value=b"1", operation_type=StateOperationType.UPSERT, etag="2"
        ),
        StateTransactionRequest(key="b", value=None, operation_type=StateOperationType.DELETE),
    ]

    async def run_case():
        async with running_sidecar(servicer) as channel:
            await _client(channel).execute_state_transaction("statestore", operations)

        sent = servicer.requests[0]
        assert sent.storeName == "statestore"
        assert [op.operationType for op in sent.operations] == ["upsert", "delete"]
        assert sent.operations[0].request.value == b"1"
        assert sent.operations[0].request.etag == "2"
        assert sent.operations[1].request.key == "b"

    asyncio.run(run_case())


def test_publish_event_and_invoke_binding():
    servicer = StateStoreServicer()

    async def run_case():
        async with running_sidecar(servicer) as channel:
            client = _client(channel)
            await client.publish_event(
                "pubsub", "orders", {"id": 1}, data_content_type="application/json"
            )
            result = await client.invoke_binding("mailer", "create", {"to": "ops"})

        published, binding = servicer.requests
        assert published.pubsub_name == "pubsub"
        assert published.topic == "orders"
        assert published.data == b'{"id":1}'
        assert published.data_content_type == "application/json"
        assert binding.name == "mailer"
        assert binding.operation == "create"
        assert binding.data == b'{"to":"ops"}'
        assert result == {"sent": True}

    asyncio.run(run_case())


def test_get_secret_returns_mapping():
    servicer = StateStoreServicer()

    async def run_case():
        async with running_sidecar(servicer) as channel:
            secret = await _client(channel).get_secret("vault", "db")

        assert secret == {"password": "hunter2"}
        assert servicer.requests[0].store_name == "vault"

    asyncio.run(run_case())


def test_unimplemented_sidecar_method_is_transport_failure():
    class BareServicer(RecordingServicer):
        pass

    async def run_case():
        async with running_sidecar(BareServicer()) as channel:
            with pytest.raises(TransportFailure) as exc_info:
                await _client(channel).get_secret("vault", "db")

        assert exc_info.value.app_id == "vault"

    asyncio.run(run_case())


@pytest.mark.parametrize(
    "call",
    [
        lambda client: client.get_state("", "k"),
        lambda client: client.save_state("statestore", " ", 1),
        lambda client: client.get_bulk_state("statestore", []),
        lambda client: client.execute_state_transaction("statestore", []),
        lambda client: client.publish_event("pubsub", ""),
        lambda client: client.invoke_binding("", "create"),
        lambda client: client.get_secret("vault", ""),
        lambda client: client.try_delete_state("", "k", "1"),
    ],
)
def test_operations_validate_arguments_before_calling(call):
    class NoCalls:
        def __getattr__(self, name):
            raise AssertionError("unexpected channel use: {0}".format(name))

    class OfflineChannel:
        def unary_unary(self, *args, **kwargs):
            return NoCalls()

    async def run_case():
        client = DaprClient(
            config=DaprClientConfig(),
            channel=OfflineChannel(),
            credential_provider=StaticTokenProvider(None),
        )
        with pytest.raises(ValidationError):
            await call(client)

    asyncio.run(run_case())


def test_invoke_method_variants_share_the_resolver():
    servicer = StateStoreServicer()

    async def run_case():
        async with running_sidecar(servicer) as channel:
            client = _client(channel)
            echoed = await client.invoke_method("orders", "echo", {"id": 7})
            raw = await client.invoke_method_raw("orders", "echo", b"\x00raw")
            full = await client.invoke_method_with_response("orders", "echo")

        assert echoed == {"id": 7}
        assert raw.body == b"\x00raw"
        assert full.body is None
        assert full.grpc_status.code is grpc.StatusCode.OK
        assert [request.message.method for request in servicer.requests] == ["echo"] * 3

    asyncio.run(run_case())


def test_get_bulk_state_replaces_invalid_utf8():
    servicer = StateStoreServicer()
    servicer.store["blob"] = (b"ok\xff\xfe", "3")

    async def run_case():
        async with running_sidecar(servicer) as channel:
            items = await _client(channel).get_bulk_state("statestore", ["blob"])

        assert items[0].value == "ok\ufffd\ufffd"
        assert items[0].etag == "3"

    asyncio.run(run_case())


def test_payload_codec_failures_carry_the_target():
    servicer = StateStoreServicer()
    servicer.store["broken"] = (b"{not json", "1")

    async def run_case():
        async with running_sidecar(servicer) as channel:
            client = _client(channel)
            with pytest.raises(PayloadError) as publish_info:
                await client.publish_event("pubsub", "orders", {"handle": object()})
            with pytest.raises(PayloadError) as read_info:
                await client.get_state("statestore", "broken")

        assert publish_info.value.app_id == "pubsub"
        assert publish_info.value.method_name == "publish:orders"
        assert read_info.value.app_id == "statestore"
        assert read_info.value.method_name == "get:broken"
        assert servicer.requests and servicer.requests[0].key == "broken"

    asyncio.run(run_case())
