#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Async client for the sidecar gRPC API.

``DaprClient`` exposes service invocation plus the state, secret, pub/sub and
binding operations. Every operation builds its request message and hands it
to ``InvocationResolver``, so validation, authentication, cancellation and
error translation behave the same everywhere.

Usage Example:
    >>> async with DaprClient() as client:
    ...     order = await client.invoke_method("orders", "get-order", {"id": 7})
    ...     await client.save_state("statestore", "last-order", order)
"""

import asyncio
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from grpc import aio as grpc_aio

from ..config import DaprClientConfig, get_config
from ..data.backends import JSONBackend, SerializationBackend
from ..data.models import (
    BodyKind,
    BulkStateItem,
    ConsistencyMode,
    HTTPExtension,
    InvocationRequest,
    InvocationResponse,
    OperationResult,
    StateOptions,
    StateTransactionRequest,
)
from ..invocation.credentials import CredentialProvider, EnvironmentTokenProvider
from ..invocation.resolver import InvocationResolver
from ..protos import dapr_pb2, dapr_pb2_grpc
from ..utils.exceptions import InvocationError
from ..utils.logger import ModernLogger
from ..utils.validation import require_items, require_not_empty


def _state_options_to_proto(options: Optional[StateOptions]) -> Optional[Any]:
    if options is None:
        return None
    proto_options = dapr_pb2.StateOptions()
    if options.consistency is not None:
        proto_options.consistency = options.consistency.value
    if options.concurrency is not None:
        proto_options.concurrency = options.concurrency.value
    return proto_options


def _update_metadata(target: Any, metadata: Optional[Mapping[str, str]]) -> None:
    if metadata:
        target.update({str(key): str(value) for key, value in metadata.items()})


class DaprClient(ModernLogger):
    """
    Client for one sidecar.

    Args:
        config: Client settings, ``get_config()`` when omitted
        channel: Existing ``grpc.aio`` channel. When omitted the client opens
            an insecure channel to ``config.grpc_address`` and closes it in
            ``close()``
        credential_provider: API token source, defaults to reading
            ``config.api_token_env_var`` on every call
        serializer: Backend for typed payloads, defaults to ``JSONBackend``
    """

    def __init__(
        self,
        config: Optional[DaprClientConfig] = None,
        channel: Optional[grpc_aio.Channel] = None,
        credential_provider: Optional[CredentialProvider] = None,
        serializer: Optional[SerializationBackend] = None,
    ):
        self.config = config or get_config()
        ModernLogger.__init__(self, name=f"{__name__}.DaprClient", level=self.config.log_level)

        self._owns_channel = channel is None
        if channel is None:
            self.debug("Opening channel to sidecar at %s", self.config.grpc_address)
            channel = grpc_aio.insecure_channel(self.config.grpc_address)
        self._channel = channel
        self._stub = dapr_pb2_grpc.DaprStub(channel)
        self._serializer = serializer or JSONBackend(self.config.serialization)
        self._resolver = InvocationResolver(
            stub=self._stub,
            serializer=self._serializer,
            credential_provider=(
                credential_provider
                if credential_provider is not None
                else EnvironmentTokenProvider(self.config.api_token_env_var)
            ),
            default_timeout=self.config.default_timeout,
            log_level=self.config.log_level,
        )

    @property
    def resolver(self) -> InvocationResolver:
        return self._resolver

    @property
    def serializer(self) -> SerializationBackend:
        return self._serializer

    async def close(self) -> None:
        """
        Close the channel if this client opened it.
        """
        if self._owns_channel:
            await self._channel.close()

    async def __aenter__(self) -> "DaprClient":
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Service invocation
    # ------------------------------------------------------------------

    async def invoke_method(
        self,
        app_id: str,
        method_name: str,
        data: Any = None,
        http_extension: Optional[HTTPExtension] = None,
        timeout: Optional[float] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> Any:
        """
        Invoke a method and return only the decoded response body.
        """
        response = await self.invoke_method_with_response(
            app_id,
            method_name,
            data,
            http_extension=http_extension,
            timeout=timeout,
            cancel_event=cancel_event,
        )
        return response.body

    async def invoke_method_with_response(
        self,
        app_id: str,
        method_name: str,
        data: Any = None,
        http_extension: Optional[HTTPExtension] = None,
        timeout: Optional[float] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> InvocationResponse:
        """
        Invoke a method with a typed body and return the full response.
        """
        request = InvocationRequest(
            app_id=app_id,
            method_name=method_name,
            body=data,
            http_extension=http_extension,
            body_kind=BodyKind.TYPED,
            timeout=timeout,
            cancel_event=cancel_event,
        )
        return await self._resolver.invoke(request)

    async def invoke_method_raw(
        self,
        app_id: str,
        method_name: str,
        data: Optional[bytes] = None,
        http_extension: Optional[HTTPExtension] = None,
        timeout: Optional[float] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> InvocationResponse:
        """
        Invoke a method exchanging raw bytes; the response body is ``bytes``
        (or ``None`` when the callee returned nothing).
        """
        request = InvocationRequest(
            app_id=app_id,
            method_name=method_name,
            body=data,
            http_extension=http_extension,
            body_kind=BodyKind.RAW,
            timeout=timeout,
            cancel_event=cancel_event,
        )
        return await self._resolver.invoke(request)

    # ------------------------------------------------------------------
    # Pub/sub and bindings
    # ------------------------------------------------------------------

    async def publish_event(
        self,
        pubsub_name: str,
        topic: str,
        data: Any = None,
        metadata: Optional[Mapping[str, str]] = None,
        data_content_type: Optional[str] = None,
    ) -> None:
        require_not_empty(pubsub_name, "pubsub_name")
        require_not_empty(topic, "topic")

        envelope = dapr_pb2.PublishEventRequest(pubsub_name=pubsub_name, topic=topic)
        if data is not None:
            envelope.data = self._resolver.encode_payload(
                data, pubsub_name, "publish:" + topic
            )
        if data_content_type:
            envelope.data_content_type = data_content_type
        _update_metadata(envelope.metadata, metadata)

        await self._resolver.call(
            "PublishEvent", envelope, target=pubsub_name, operation="publish:" + topic
        )

    async def invoke_binding(
        self,
        name: str,
        operation: str,
        data: Any = None,
        metadata: Optional[Mapping[str, str]] = None,
    ) -> Any:
        """
        Invoke an output binding and return its decoded response data.
        """
        require_not_empty(name, "name")
        require_not_empty(operation, "operation")

        envelope = dapr_pb2.InvokeBindingRequest(name=name, operation=operation)
        if data is not None:
            envelope.data = self._resolver.encode_payload(data, name, operation)
        _update_metadata(envelope.metadata, metadata)

        response = await self._resolver.call(
            "InvokeBinding", envelope, target=name, operation=operation
        )
        return self._resolver.decode_payload(response.data, name, operation)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    async def get_state(
        self,
        store_name: str,
        key: str,
        consistency: Optional[ConsistencyMode] = None,
        metadata: Optional[Mapping[str, str]] = None,
    ) -> Any:
        value, _ = await self.get_state_and_etag(store_name, key, consistency, metadata)
        return value

    async def get_state_and_etag(
        self,
        store_name: str,
        key: str,
        consistency: Optional[ConsistencyMode] = None,
        metadata: Optional[Mapping[str, str]] = None,
    ) -> Tuple[Any, str]:
        """
        Return the decoded value (``None`` when missing) and its etag.
        """
        require_not_empty(store_name, "store_name")
        require_not_empty(key, "key")

        envelope = dapr_pb2.GetStateRequest(store_name=store_name, key=key)
        if consistency is not None:
            envelope.consistency = consistency.value
        _update_metadata(envelope.metadata, metadata)

        response = await self._resolver.call(
            "GetState", envelope, target=store_name, operation="get:" + key
        )
        if not response.data:
            return None, response.etag
        return (
            self._resolver.decode_payload(response.data, store_name, "get:" + key),
            response.etag,
        )

    async def get_bulk_state(
        self,
        store_name: str,
        keys: Sequence[str],
        parallelism: Optional[int] = None,
        metadata: Optional[Mapping[str, str]] = None,
    ) -> List[BulkStateItem]:
        """
        Fetch several keys at once. Values are returned as UTF-8 text.
        """
        require_not_empty(store_name, "store_name")
        require_items(keys, "keys")

        envelope = dapr_pb2.GetBulkStateRequest(
            store_name=store_name, parallelism=parallelism or 0
        )
        envelope.keys.extend(keys)
        _update_metadata(envelope.metadata, metadata)

        response = await self._resolver.call(
            "GetBulkState", envelope, target=store_name, operation="get-bulk"
        )
        return [
            BulkStateItem(
                key=item.key,
                value=item.data.decode("utf-8", errors="replace"),
                etag=item.etag,
                error=item.error,
            )
            for item in response.items
        ]

    async def save_state(
        self,
        store_name: str,
        key: str,
        value: Any,
        state_options: Optional[StateOptions] = None,
        metadata: Optional[Mapping[str, str]] = None,
    ) -> None:
        require_not_empty(store_name, "store_name")
        require_not_empty(key, "key")
        await self._save_state(store_name, key, value, None, state_options, metadata)

    async def try_save_state(
        self,
        store_name: str,
        key: str,
        value: Any,
        etag: str,
        state_options: Optional[StateOptions] = None,
        metadata: Optional[Mapping[str, str]] = None,
    ) -> OperationResult:
        """
        Save guarded by ``etag``. A failed call is reported, not raised.
        """
        require_not_empty(store_name, "store_name")
        require_not_empty(key, "key")
        try:
            await self._save_state(store_name, key, value, etag, state_options, metadata)
        except InvocationError as exc:
            self.warning("Saving '%s' in '%s' failed: %s", key, store_name, exc)
            return OperationResult.failed(exc)
        return OperationResult.ok()

    async def _save_state(
        self,
        store_name: str,
        key: str,
        value: Any,
        etag: Optional[str],
        state_options: Optional[StateOptions],
        metadata: Optional[Mapping[str, str]],
    ) -> None:
        item = dapr_pb2.StateItem(key=key)
        _update_metadata(item.metadata, metadata)
        if etag is not None:
            item.etag = etag
        proto_options = _state_options_to_proto(state_options)
        if proto_options is not None:
            item.options.CopyFrom(proto_options)
        if value is not None:
            item.value = self._resolver.encode_payload(value, store_name, "save:" + key)

        envelope = dapr_pb2.SaveStateRequest(store_name=store_name)
        envelope.states.append(item)
        await self._resolver.call(
            "SaveState", envelope, target=store_name, operation="save:" + key
        )

    async def delete_state(
        self,
        store_name: str,
        key: str,
        state_options: Optional[StateOptions] = None,
        metadata: Optional[Mapping[str, str]] = None,
    ) -> None:
        require_not_empty(store_name, "store_name")
        require_not_empty(key, "key")
        await self._delete_state(store_name, key, None, state_options, metadata)

    async def try_delete_state(
        self,
        store_name: str,
        key: str,
        etag: str,
        state_options: Optional[StateOptions] = None,
        metadata: Optional[Mapping[str, str]] = None,
    ) -> OperationResult:
        """
        Delete guarded by ``etag``. A failed call is reported, not raised.
        """
        require_not_empty(store_name, "store_name")
        require_not_empty(key, "key")
        try:
            await self._delete_state(store_name, key, etag, state_options, metadata)
        except InvocationError as exc:
            self.warning("Deleting '%s' from '%s' failed: %s", key, store_name, exc)
            return OperationResult.failed(exc)
        return OperationResult.ok()

    async def _delete_state(
        self,
        store_name: str,
        key: str,
        etag: Optional[str],
        state_options: Optional[StateOptions],
        metadata: Optional[Mapping[str, str]],
    ) -> None:
        envelope = dapr_pb2.DeleteStateRequest(store_name=store_name, key=key)
        _update_metadata(envelope.metadata, metadata)
        if etag is not None:
            envelope.etag = etag
        proto_options = _state_options_to_proto(state_options)
        if proto_options is not None:
            envelope.options.CopyFrom(proto_options)

        await self._resolver.call(
            "DeleteState", envelope, target=store_name, operation="delete:" + key
        )

    async def execute_state_transaction(
        self,
        store_name: str,
        operations: Sequence[StateTransactionRequest],
        metadata: Optional[Mapping[str, str]] = None,
    ) -> None:
        """
        Apply upserts and deletes atomically. Values must already be bytes.
        """
        require_not_empty(store_name, "store_name")
        require_items(operations, "operations")

        envelope = dapr_pb2.ExecuteStateTransactionRequest(storeName=store_name)
        for operation in operations:
            item = dapr_pb2.StateItem(key=operation.key)
            if operation.value is not None:
                item.value = bytes(operation.value)
            if operation.etag is not None:
                item.etag = operation.etag
            _update_metadata(item.metadata, operation.metadata)
            proto_options = _state_options_to_proto(operation.options)
            if proto_options is not None:
                item.options.CopyFrom(proto_options)
            envelope.operations.append(
                dapr_pb2.TransactionalStateOperation(
                    operationType=operation.operation_type.value, request=item
                )
            )
        _update_metadata(envelope.metadata, metadata)

        await self._resolver.call(
            "ExecuteStateTransaction", envelope, target=store_name, operation="transaction"
        )

    # ------------------------------------------------------------------
    # Secrets
    # ------------------------------------------------------------------

    async def get_secret(
        self,
        store_name: str,
        key: str,
        metadata: Optional[Mapping[str, str]] = None,
    ) -> Dict[str, str]:
        require_not_empty(store_name, "store_name")
        require_not_empty(key, "key")

        envelope = dapr_pb2.GetSecretRequest(store_name=store_name, key=key)
        _update_metadata(envelope.metadata, metadata)

        response = await self._resolver.call(
            "GetSecret", envelope, target=store_name, operation="secret:" + key
        )
        return dict(response.data)
