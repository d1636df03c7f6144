#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Unified service invocation through the sidecar.

``InvocationResolver`` sends one ``InvokeService`` call per request and turns
the outcome into a single response shape, whether the target application
speaks gRPC natively or is an HTTP application reached through the sidecar:

- HTTP callees are recognised by the ``dapr-http-status`` response header;
  the response then carries an HTTP status code and a JSON content type.
- gRPC callees get a ``CompositeStatus`` built from the call status and the
  ``application/grpc`` content type.

Failed calls are decoded with ``RichErrorDecoder`` and re-raised as
``InvocationError`` subclasses carrying the app id and method name.

The resolver also exposes ``call``, the shared "call the sidecar and surface
errors" primitive used by the state, secret, pub/sub and binding operations.
There are no retries: every call is a single attempt.
"""

import asyncio
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Sequence, Tuple

import grpc
from grpc import aio as grpc_aio

from ..data.backends import JSONBackend, RawBytesBackend, SerializationBackend
from ..data.models import (
    CONTENT_TYPE_GRPC,
    CONTENT_TYPE_JSON,
    BodyKind,
    CompositeStatus,
    HTTPVerb,
    InvocationRequest,
    InvocationResponse,
)
from ..protos import dapr_pb2
from ..utils.exceptions import (
    ExceptionTranslator,
    InvocationCancelledError,
    InvocationError,
    ProtocolError,
    SerializationError,
)
from ..utils.logger import ModernLogger
from ..utils.validation import require_not_empty
from .credentials import CredentialProvider, EnvironmentTokenProvider, credential_metadata
from .rich_errors import DetailOutcome, RichErrorDecoder

HTTP_STATUS_HEADER = "dapr-http-status"
RAW_BYTES_TYPE_URL = "bytes"

MetadataPairs = Sequence[Tuple[str, str]]


class CallResult(NamedTuple):
    response: Any
    initial_metadata: Any = None
    trailing_metadata: Any = None
    code: Optional[grpc.StatusCode] = None
    details: Optional[str] = None


def metadata_to_dict(metadata: Optional[Iterable[Tuple[str, Any]]]) -> Dict[str, bytes]:
    """
    Flatten call metadata into ``name -> bytes``. The first value of a
    repeated key wins.
    """
    result: Dict[str, bytes] = {}
    for key, value in metadata or ():
        if key in result:
            continue
        result[key] = value if isinstance(value, bytes) else str(value).encode("utf-8")
    return result


def _type_name(value: Any) -> str:
    value_type = type(value)
    if value_type.__module__ == "builtins":
        return value_type.__qualname__
    return "{0}.{1}".format(value_type.__module__, value_type.__qualname__)


def _consume_task_result(task: "asyncio.Future[Any]") -> None:
    if not task.cancelled():
        task.exception()


class InvocationResolver(ModernLogger):
    """
    Issues sidecar calls and reconciles their results.

    Args:
        stub: ``DaprStub`` bound to a ``grpc.aio`` channel
        serializer: Structured backend used for ``BodyKind.TYPED`` payloads
        credential_provider: Returns the API token for each call, or ``None``
        decoder: Rich error decoder applied to failed calls
        default_timeout: Deadline in seconds applied when a call sets none
    """

    def __init__(
        self,
        stub: Any,
        serializer: Optional[SerializationBackend] = None,
        credential_provider: Optional[CredentialProvider] = None,
        decoder: Optional[RichErrorDecoder] = None,
        default_timeout: Optional[float] = None,
        log_level: Optional[str] = None,
    ):
        ModernLogger.__init__(self, name=f"{__name__}.InvocationResolver", level=log_level)
        self._stub = stub
        self._serializer = serializer or JSONBackend()
        self._codecs: Dict[BodyKind, SerializationBackend] = {
            BodyKind.TYPED: self._serializer,
            BodyKind.RAW: RawBytesBackend(),
        }
        self._credential_provider = (
            credential_provider if credential_provider is not None else EnvironmentTokenProvider()
        )
        self._decoder = decoder or RichErrorDecoder()
        self._default_timeout = default_timeout

    @property
    def serializer(self) -> SerializationBackend:
        return self._serializer

    async def invoke(self, request: InvocationRequest) -> InvocationResponse:
        """
        Invoke ``request.method_name`` on ``request.app_id``.

        Raises:
            ValidationError: app id or method name is empty (no call is made)
            UnsupportedOperationError: the HTTP verb is not supported
            ProtocolError: ``dapr-http-status`` is not an integer
            TransportFailure: the call failed without a rich error detail
            RemoteApplicationError: the call failed with a decoded detail
            InvocationCancelledError: ``request.cancel_event`` was set
            PayloadError: the body could not be encoded or the response decoded
        """
        require_not_empty(request.app_id, "app_id")
        require_not_empty(request.method_name, "method_name")

        codec = self._codecs[request.body_kind]
        try:
            message, metadata = self.build_invoke_request(request, codec)
        except InvocationError as exc:
            exc.app_id = request.app_id
            exc.method_name = request.method_name
            raise
        except SerializationError as exc:
            raise ExceptionTranslator.as_payload_error(
                exc, request.app_id, request.method_name
            ) from exc

        result = await self._execute(
            "InvokeService",
            message,
            target=request.app_id,
            operation=request.method_name,
            metadata=metadata,
            timeout=request.timeout,
            cancel_event=request.cancel_event,
            collect_metadata=True,
        )
        return self._resolve_response(request, codec, result)

    async def call(
        self,
        rpc: str,
        message: Any,
        target: str,
        operation: Optional[str] = None,
        metadata: MetadataPairs = (),
        timeout: Optional[float] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> Any:
        """
        Call ``rpc`` on the sidecar and return its response message.

        Failures are translated exactly as for ``invoke``, with ``target``
        (store, topic, binding...) reported as the app id.
        """
        result = await self._execute(
            rpc,
            message,
            target=target,
            operation=operation or rpc,
            metadata=metadata,
            timeout=timeout,
            cancel_event=cancel_event,
        )
        return result.response

    def encode_payload(self, value: Any, target: str, operation: str) -> bytes:
        """
        Serialize a typed payload for a sidecar request.
        """
        try:
            return self._serializer.serialize(value)
        except SerializationError as exc:
            raise ExceptionTranslator.as_payload_error(exc, target, operation) from exc

    def decode_payload(self, data: bytes, target: str, operation: str) -> Any:
        try:
            return self._serializer.deserialize(data)
        except SerializationError as exc:
            raise ExceptionTranslator.as_payload_error(exc, target, operation) from exc

    def build_invoke_request(
        self, request: InvocationRequest, codec: SerializationBackend
    ) -> Tuple[Any, List[Tuple[str, str]]]:
        """
        Build the ``InvokeServiceRequest`` and the extra call metadata.
        """
        extension = request.http_extension
        proto_extension = dapr_pb2.HTTPExtension()
        metadata: List[Tuple[str, str]] = []

        if extension is None:
            proto_extension.verb = HTTPVerb.POST.value
            content_type = CONTENT_TYPE_JSON
        else:
            proto_extension.verb = HTTPVerb.parse(extension.verb).value
            for key, value in (extension.query_string or {}).items():
                proto_extension.querystring[str(key)] = str(value)
            for key, value in (extension.headers or {}).items():
                metadata.append((str(key).lower(), str(value)))
            content_type = extension.content_type or CONTENT_TYPE_JSON

        invoke_request = dapr_pb2.InvokeRequest(
            method=request.method_name,
            content_type=content_type,
            http_extension=proto_extension,
        )
        if request.body is not None:
            invoke_request.data.CopyFrom(self._encode_body(request, codec))

        return (
            dapr_pb2.InvokeServiceRequest(id=request.app_id, message=invoke_request),
            metadata,
        )

    def _encode_body(self, request: InvocationRequest, codec: SerializationBackend) -> Any:
        payload = codec.serialize(request.body)
        if request.body_kind is BodyKind.RAW:
            type_url = RAW_BYTES_TYPE_URL
        else:
            type_url = _type_name(request.body)
        return dapr_pb2.Any(type_url=type_url, value=payload)

    def _decode_body(self, codec: SerializationBackend, response: Any) -> Any:
        if not response.HasField("data"):
            return None
        payload = response.data.value
        if not payload:
            return None
        return codec.deserialize(payload)

    def _resolve_response(
        self,
        request: InvocationRequest,
        codec: SerializationBackend,
        result: CallResult,
    ) -> InvocationResponse:
        headers = metadata_to_dict(result.initial_metadata)
        trailers = metadata_to_dict(result.trailing_metadata)
        try:
            body = self._decode_body(codec, result.response)
        except SerializationError as exc:
            raise ExceptionTranslator.as_payload_error(
                exc, request.app_id, request.method_name
            ) from exc

        raw_http_status = headers.get(HTTP_STATUS_HEADER)
        if raw_http_status is not None:
            http_status = self._parse_http_status(request, raw_http_status)
            return InvocationResponse(
                request=request,
                body=body,
                headers=headers,
                trailers=trailers,
                content_type=CONTENT_TYPE_JSON,
                http_status_code=http_status,
            )

        return InvocationResponse(
            request=request,
            body=body,
            headers=headers,
            trailers=trailers,
            content_type=CONTENT_TYPE_GRPC,
            grpc_status=CompositeStatus(
                code=result.code if result.code is not None else grpc.StatusCode.OK,
                message=result.details or "",
            ),
        )

    @staticmethod
    def _parse_http_status(request: InvocationRequest, raw_value: bytes) -> int:
        try:
            return int(raw_value.decode("utf-8").strip())
        except (UnicodeDecodeError, ValueError) as exc:
            raise ProtocolError(
                message="Invalid {0} header {1!r} while invoking {2} on appId:{3}".format(
                    HTTP_STATUS_HEADER, raw_value, request.method_name, request.app_id
                ),
                app_id=request.app_id,
                method_name=request.method_name,
                cause=exc,
            ) from exc

    async def _execute(
        self,
        rpc: str,
        message: Any,
        target: str,
        operation: str,
        metadata: MetadataPairs = (),
        timeout: Optional[float] = None,
        cancel_event: Optional[asyncio.Event] = None,
        collect_metadata: bool = False,
    ) -> CallResult:
        call_metadata = list(metadata) + credential_metadata(self._credential_provider)
        if timeout is None:
            timeout = self._default_timeout

        if cancel_event is not None and cancel_event.is_set():
            raise InvocationCancelledError(
                message="Invocation of {0} on {1} was cancelled before it started".format(
                    operation, target
                ),
                app_id=target,
                method_name=operation,
            )

        self.debug("Calling %s (%s) on %s", rpc, operation, target)
        multi_callable = getattr(self._stub, rpc)
        call = multi_callable(message, metadata=call_metadata or None, timeout=timeout)
        try:
            return await self._await_call(call, target, operation, cancel_event, collect_metadata)
        except grpc_aio.AioRpcError as exc:
            raise self._translate_failure(exc, target, operation) from exc
        except asyncio.CancelledError:
            call.cancel()
            raise

    async def _await_call(
        self,
        call: Any,
        target: str,
        operation: str,
        cancel_event: Optional[asyncio.Event],
        collect_metadata: bool,
    ) -> CallResult:
        if cancel_event is None:
            return await self._collect(call, collect_metadata)

        result_task = asyncio.ensure_future(self._collect(call, collect_metadata))
        cancel_task = asyncio.ensure_future(cancel_event.wait())
        try:
            await asyncio.wait(
                {result_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            result_task.cancel()
            raise
        finally:
            cancel_task.cancel()

        if result_task.done():
            return result_task.result()

        # Headers or trailers received so far are dropped with the task.
        call.cancel()
        result_task.cancel()
        result_task.add_done_callback(_consume_task_result)
        self.debug("Cancelled %s on %s", operation, target)
        raise InvocationCancelledError(
            message="Invocation of {0} on {1} was cancelled".format(operation, target),
            app_id=target,
            method_name=operation,
        )

    @staticmethod
    async def _collect(call: Any, collect_metadata: bool) -> CallResult:
        response = await call
        if not collect_metadata:
            return CallResult(response=response)
        return CallResult(
            response=response,
            initial_metadata=await call.initial_metadata(),
            trailing_metadata=await call.trailing_metadata(),
            code=await call.code(),
            details=await call.details(),
        )

    def _translate_failure(
        self, exc: grpc_aio.AioRpcError, target: str, operation: str
    ) -> InvocationError:
        details = self._decoder.decode(exc.trailing_metadata())
        if details.outcome is DetailOutcome.UNDECODABLE:
            self.warning(
                "Ignoring undecodable error details from %s on %s: %s",
                operation,
                target,
                details.reason,
            )
        elif details.decoded:
            self.warning(
                "%s on %s failed with HTTP %s: %s",
                operation,
                target,
                details.status.http_status_code,
                details.status.http_error_message,
            )
        else:
            self.debug("%s on %s failed: %s", operation, target, exc.code())

        return ExceptionTranslator.as_invocation_error(
            exc,
            app_id=target,
            method_name=operation,
            status=details.status,
        )
