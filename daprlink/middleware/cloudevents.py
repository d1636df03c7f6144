#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
CloudEvents envelope normalization for inbound HTTP requests.

Pub/sub deliveries arrive as structured CloudEvents
(``application/cloudevents+json``). ``CloudEventsMiddleware`` unwraps them so
route handlers receive the inner ``data`` with its own content type, exactly
as if the publisher had called them directly. Every other request, batch
envelopes included, reaches the application untouched.

Usage Example:
    >>> app = Starlette(routes=routes)
    >>> add_cloud_events(app)
"""

import base64
import binascii
import codecs
import json
from typing import Any, Dict, Optional, Tuple

from starlette.datastructures import Headers, MutableHeaders
from starlette.requests import Request
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from ..core.data.backends import JSONBackend
from ..core.data.config import SerializationConfig
from ..core.data.models import CONTENT_TYPE_JSON
from ..core.utils.exceptions import EnvelopeParseError, SerializationError
from ..core.utils.logger import ModernLogger

CLOUD_EVENT_CONTENT_TYPE = "application/cloudevents+json"
CANONICAL_CHARSET = "utf-8"


def parse_content_type(value: Optional[str]) -> Tuple[str, Dict[str, str]]:
    """
    Split a content type header into its lowercased media type and a
    parameter mapping with lowercased names.

    >>> parse_content_type("Application/JSON; charset=UTF-8")
    ('application/json', {'charset': 'UTF-8'})
    """
    if not value:
        return "", {}
    media_type, *raw_params = value.split(";")
    params: Dict[str, str] = {}
    for raw in raw_params:
        name, sep, param_value = raw.partition("=")
        if not sep:
            continue
        params[name.strip().lower()] = param_value.strip().strip('"')
    return media_type.strip().lower(), params


def resolve_charset(charset: Optional[str]) -> str:
    """
    Codec name for ``charset``, or UTF-8 when it is missing, unknown or
    not a text encoding (``base64``, ``zlib``...).
    """
    if not charset:
        return CANONICAL_CHARSET
    try:
        name = codecs.lookup(charset).name
        "".encode(name)
    except LookupError:
        return CANONICAL_CHARSET
    return name


def _is_json_media_type(media_type: str) -> bool:
    return media_type == CONTENT_TYPE_JSON or media_type.endswith("+json")


def parse_envelope(body: bytes, charset: str = CANONICAL_CHARSET) -> Dict[str, Any]:
    """
    Decode and parse a structured CloudEvent body into a dict.

    Raises:
        EnvelopeParseError: the body is not text in ``charset`` or not a
            JSON object
    """
    encoding = resolve_charset(charset)
    if encoding == CANONICAL_CHARSET:
        encoding = "utf-8-sig"
    try:
        envelope = json.loads(bytes(body).decode(encoding))
    except (UnicodeDecodeError, LookupError, json.JSONDecodeError) as exc:
        raise EnvelopeParseError(
            message="Malformed CloudEvent body: {0}".format(exc),
            content_type=CLOUD_EVENT_CONTENT_TYPE,
            cause=exc,
        ) from exc

    if not isinstance(envelope, dict):
        raise EnvelopeParseError(
            message="CloudEvent body must be a JSON object, got {0}".format(
                type(envelope).__name__
            ),
            content_type=CLOUD_EVENT_CONTENT_TYPE,
        )
    return envelope


class CloudEventNormalizer:
    """
    Rewrites a structured CloudEvent into its inner payload.

    The rewritten body is always UTF-8. Any charset declared on
    ``datacontenttype`` is dropped from the new content type, since it no
    longer describes the bytes.
    """

    def __init__(self, serializer: Optional[JSONBackend] = None):
        self._serializer = serializer or JSONBackend(
            SerializationConfig(ensure_ascii=False, compact=True)
        )

    @staticmethod
    def matches(content_type: Optional[str]) -> bool:
        media_type, _ = parse_content_type(content_type)
        return media_type == CLOUD_EVENT_CONTENT_TYPE

    def normalize(self, content_type: Optional[str], body: bytes) -> Tuple[Optional[str], bytes]:
        """
        Return the content type and body downstream handlers should see.
        Requests that are not structured CloudEvents come back unchanged.
        """
        if not self.matches(content_type):
            return content_type, body

        _, params = parse_content_type(content_type)
        envelope = parse_envelope(body, resolve_charset(params.get("charset")))

        declared = envelope.get("datacontenttype")
        if declared is not None and not isinstance(declared, str):
            raise EnvelopeParseError(
                message="CloudEvent datacontenttype must be a string",
                content_type=content_type,
            )

        if declared:
            new_content_type, _ = parse_content_type(declared)
        else:
            new_content_type = CONTENT_TYPE_JSON

        if "data" in envelope:
            new_body = self._encode_data(envelope["data"], new_content_type)
        elif "data_base64" in envelope:
            new_body = self._decode_base64(envelope["data_base64"], content_type)
        elif not declared:
            # No data at all: the event id stands in for the payload.
            new_body = str(envelope.get("id") or "").encode(CANONICAL_CHARSET)
        else:
            new_body = b""

        return new_content_type, new_body

    def _encode_data(self, data: Any, media_type: str) -> bytes:
        if isinstance(data, str) and not _is_json_media_type(media_type):
            return data.encode(CANONICAL_CHARSET)
        try:
            return self._serializer.serialize(data)
        except SerializationError as exc:
            raise EnvelopeParseError(
                message="CloudEvent data cannot be re-encoded: {0}".format(exc),
                cause=exc,
            ) from exc

    @staticmethod
    def _decode_base64(value: Any, content_type: Optional[str]) -> bytes:
        if not isinstance(value, str):
            raise EnvelopeParseError(
                message="CloudEvent data_base64 must be a string",
                content_type=content_type,
            )
        try:
            return base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise EnvelopeParseError(
                message="CloudEvent data_base64 is not valid base64",
                content_type=content_type,
                cause=exc,
            ) from exc


class CloudEventsMiddleware(ModernLogger):
    """
    ASGI middleware applying ``CloudEventNormalizer`` to HTTP requests.

    Matching requests are fully buffered, then replayed to the wrapped app
    with the rewritten body and updated ``content-type`` and
    ``content-length`` headers. Parse failures propagate.
    """

    def __init__(
        self,
        app: ASGIApp,
        normalizer: Optional[CloudEventNormalizer] = None,
        log_level: Optional[str] = None,
    ):
        ModernLogger.__init__(self, name=f"{__name__}.CloudEventsMiddleware", level=log_level)
        self.app = app
        self.normalizer = normalizer or CloudEventNormalizer()

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        content_type = Headers(scope=scope).get("content-type")
        if not self.normalizer.matches(content_type):
            await self.app(scope, receive, send)
            return

        body = await Request(scope, receive).body()
        new_content_type, new_body = self.normalizer.normalize(content_type, body)
        self.debug(
            "Unwrapped CloudEvent for %s: %s -> %s",
            scope.get("path"),
            content_type,
            new_content_type,
        )

        scope = dict(scope)
        headers = MutableHeaders(scope=scope)
        headers["content-type"] = new_content_type or CONTENT_TYPE_JSON
        headers["content-length"] = str(len(new_body))

        replayed = False

        async def replay_receive() -> Message:
            nonlocal replayed
            if not replayed:
                replayed = True
                return {"type": "http.request", "body": new_body, "more_body": False}
            return await receive()

        await self.app(scope, replay_receive, send)


def add_cloud_events(app: Any, **options: Any) -> Any:
    """
    Register ``CloudEventsMiddleware`` on a Starlette application.
    """
    app.add_middleware(CloudEventsMiddleware, **options)
    return app
