#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Decoding of rich gRPC error details attached to failed sidecar calls.

When the sidecar fails a call on behalf of an HTTP callee it attaches a
binary ``google.rpc.Status`` under ``grpc-status-details-bin``. One of the
status details is a ``google.rpc.ErrorInfo`` whose metadata carries the HTTP
status code and error message of the callee.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Tuple, Union

from google.protobuf.message import DecodeError
from google.rpc import error_details_pb2, status_pb2

from ..data.models import CompositeStatus, status_code_from_number

GRPC_STATUS_DETAILS_KEY = "grpc-status-details-bin"
ERROR_INFO_TYPE_NAME = "google.rpc.ErrorInfo"
HTTP_CODE_METADATA_KEY = "http.code"
HTTP_ERROR_MESSAGE_METADATA_KEY = "http.error_message"

MetadataEntries = Iterable[Tuple[str, Union[str, bytes]]]


class DetailOutcome(Enum):
    """Result of looking for a rich error detail."""

    ABSENT = "absent"
    NO_ERROR_INFO = "no_error_info"
    DECODED = "decoded"
    UNDECODABLE = "undecodable"


@dataclass(frozen=True)
class RichErrorDetails:
    outcome: DetailOutcome
    status: Optional[CompositeStatus] = None
    reason: str = ""

    @property
    def decoded(self) -> bool:
        return self.outcome is DetailOutcome.DECODED


class RichErrorDecoder:
    """
    Extracts a ``CompositeStatus`` from failure metadata.

    Only the first ``ErrorInfo`` detail is considered. A status blob or
    detail that does not parse yields ``DetailOutcome.UNDECODABLE`` instead of
    an exception, so callers still surface the original failure.
    """

    def __init__(
        self,
        status_details_key: str = GRPC_STATUS_DETAILS_KEY,
        error_info_type_name: str = ERROR_INFO_TYPE_NAME,
    ):
        self.status_details_key = status_details_key
        self.error_info_type_name = error_info_type_name

    def decode(self, metadata: Optional[MetadataEntries]) -> RichErrorDetails:
        blob = self._find_status_blob(metadata)
        if blob is None:
            return RichErrorDetails(outcome=DetailOutcome.ABSENT)

        try:
            status = status_pb2.Status.FromString(blob)
        except DecodeError as exc:
            return RichErrorDetails(
                outcome=DetailOutcome.UNDECODABLE,
                reason="malformed {0}: {1}".format(self.status_details_key, exc),
            )

        for detail in status.details:
            if detail.TypeName() != self.error_info_type_name:
                continue
            return self._decode_error_info(status, detail)

        return RichErrorDetails(outcome=DetailOutcome.NO_ERROR_INFO)

    def _find_status_blob(self, metadata: Optional[MetadataEntries]) -> Optional[bytes]:
        if not metadata:
            return None
        for key, value in metadata:
            if key.lower() != self.status_details_key:
                continue
            if isinstance(value, str):
                return value.encode("latin-1")
            return bytes(value)
        return None

    def _decode_error_info(self, status, detail) -> RichErrorDetails:
        error_info = error_details_pb2.ErrorInfo()
        try:
            error_info.ParseFromString(detail.value)
        except DecodeError as exc:
            return RichErrorDetails(
                outcome=DetailOutcome.UNDECODABLE,
                reason="detail declared as {0} could not be parsed: {1}".format(
                    self.error_info_type_name, exc
                ),
            )

        raw_code = error_info.metadata.get(HTTP_CODE_METADATA_KEY, "0")
        try:
            http_code = int(raw_code)
        except ValueError:
            return RichErrorDetails(
                outcome=DetailOutcome.UNDECODABLE,
                reason="{0} is not an integer: {1!r}".format(
                    HTTP_CODE_METADATA_KEY, raw_code
                ),
            )

        composite = CompositeStatus(
            code=status_code_from_number(status.code),
            message=status.message,
            http_status_code=http_code,
            http_error_message=error_info.metadata.get(
                HTTP_ERROR_MESSAGE_METADATA_KEY, ""
            ),
        )
        return RichErrorDetails(outcome=DetailOutcome.DECODED, status=composite)
