#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Exception hierarchy for daprlink.

Every error raised by the package derives from ``DaprLinkError``. Failures of
a sidecar call are reported as ``InvocationError`` subclasses that carry the
target (app id, store, topic...) and the operation name, with the original
exception kept as ``cause`` and ``__cause__``.
"""

from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from ..data.models import CompositeStatus


class DaprLinkError(Exception):
    """
    Base class for all daprlink errors.
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        return self.message


class ValidationError(DaprLinkError, ValueError):
    """
    A required argument is missing or empty. Raised before any network call.
    """

    def __init__(self, message: str, argument: Optional[str] = None):
        super().__init__(message)
        self.argument = argument


class SerializationError(DaprLinkError):
    """
    A payload could not be serialized or deserialized.
    """

    def __init__(
        self,
        operation: str,
        message: str,
        data_type: Optional[str] = None,
        serialization_format: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message, cause=cause)
        self.operation = operation
        self.data_type = data_type
        self.serialization_format = serialization_format


class EnvelopeParseError(DaprLinkError):
    """
    A request declared as a structured CloudEvent carried a malformed body.
    """

    def __init__(
        self,
        message: str,
        content_type: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message, cause=cause)
        self.content_type = content_type


class InvocationError(DaprLinkError):
    """
    A call to the sidecar failed.

    ``status`` holds the decoded ``CompositeStatus`` when the failure carried a
    rich error detail, otherwise ``None``.
    """

    def __init__(
        self,
        message: str,
        app_id: str = "",
        method_name: str = "",
        status: Optional["CompositeStatus"] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message, cause=cause)
        self.app_id = app_id
        self.method_name = method_name
        self.status = status


class UnsupportedOperationError(InvocationError):
    """
    The requested verb or mode is not supported by the sidecar protocol.
    """


class ProtocolError(InvocationError):
    """
    The sidecar answered with a malformed well-known header.
    """


class TransportFailure(InvocationError):
    """
    The call failed and no rich error detail could be decoded.
    """


class RemoteApplicationError(InvocationError):
    """
    The call failed and the sidecar attached a decodable rich error detail.
    """


class InvocationCancelledError(InvocationError):
    """
    The call was aborted through its cancellation signal.
    """


class PayloadError(InvocationError):
    """
    The request body could not be encoded or the response body decoded.
    """


class ExceptionTranslator:
    """
    Helpers that map low-level failures onto the daprlink hierarchy.
    """

    @staticmethod
    def describe_call(app_id: str, method_name: str) -> str:
        return "Exception while invoking {0} on appId:{1}".format(method_name, app_id)

    @classmethod
    def as_invocation_error(
        cls,
        exc: BaseException,
        app_id: str,
        method_name: str,
        status: Optional["CompositeStatus"] = None,
        detail: Optional[str] = None,
    ) -> InvocationError:
        """
        Wrap a failed call. A decoded ``status`` makes it a remote application
        error, anything else is a transport failure.
        """
        if isinstance(exc, InvocationError):
            return exc

        message = cls.describe_call(app_id, method_name)
        reason = detail if detail is not None else cls._failure_reason(exc)
        if reason:
            message = "{0}: {1}".format(message, reason)

        error_cls = RemoteApplicationError if status is not None else TransportFailure
        return error_cls(
            message=message,
            app_id=app_id,
            method_name=method_name,
            status=status,
            cause=exc,
        )

    @classmethod
    def as_payload_error(
        cls, exc: BaseException, app_id: str, method_name: str
    ) -> InvocationError:
        """
        Wrap a codec failure raised while preparing or reading a call.
        """
        if isinstance(exc, InvocationError):
            return exc
        return PayloadError(
            message="{0}: {1}".format(cls.describe_call(app_id, method_name), exc),
            app_id=app_id,
            method_name=method_name,
            cause=exc,
        )

    @staticmethod
    def _failure_reason(exc: BaseException) -> str:
        details: Any = getattr(exc, "details", None)
        if callable(details):
            return str(details() or "")
        return str(exc)
