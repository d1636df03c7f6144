#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Tests for decoding ``grpc-status-details-bin`` trailers.
"""

import grpc
from google.protobuf import any_pb2
from google.rpc import error_details_pb2, status_pb2

from daprlink.core.invocation.rich_errors import DetailOutcome, RichErrorDecoder

from fake_sidecar import error_info_trailers


def test_missing_status_key_is_absent():
    details = RichErrorDecoder().decode((("content-type", "application/grpc"),))

    assert details.outcome is DetailOutcome.ABSENT
    assert details.status is None


def test_empty_metadata_is_absent():
    assert RichErrorDecoder().decode(None).outcome is DetailOutcome.ABSENT
    assert RichErrorDecoder().decode(()).outcome is DetailOutcome.ABSENT


def test_error_info_provides_http_code_and_message():
    details = RichErrorDecoder().decode(
        error_info_trailers(http_code="429", http_message="too many requests")
    )

    assert details.decoded
    assert details.status.code is grpc.StatusCode.UNKNOWN
    assert details.status.message == "callee failed"
    assert details.status.http_status_code == 429
    assert details.status.http_error_message == "too many requests"


def test_missing_http_metadata_defaults_to_zero_and_empty_message():
    details = RichErrorDecoder().decode(error_info_trailers())

    assert details.decoded
    assert details.status.http_status_code == 0
    assert details.status.http_error_message == ""


def test_first_error_info_wins_over_other_detail_types():
    retry = error_details_pb2.RetryInfo()
    retry.retry_delay.seconds = 3

    details = RichErrorDecoder().decode(
        error_info_trailers(http_code="503", http_message="busy", extra_details=(retry,))
    )

    assert details.status.http_status_code == 503


def test_status_without_error_info_has_no_composite_status():
    status = status_pb2.Status(code=5, message="not found")
    packed = any_pb2.Any()
    packed.Pack(error_details_pb2.RetryInfo())
    status.details.append(packed)

    details = RichErrorDecoder().decode(
        (("grpc-status-details-bin", status.SerializeToString()),)
    )

    assert details.outcome is DetailOutcome.NO_ERROR_INFO
    assert details.status is None


def test_garbage_blob_is_undecodable_instead_of_raising():
    details = RichErrorDecoder().decode((("grpc-status-details-bin", b"\xff\xff\xff"),))

    assert details.outcome is DetailOutcome.UNDECODABLE
    assert details.status is None
    assert details.reason


def test_non_numeric_http_code_is_undecodable():
    details = RichErrorDecoder().decode(error_info_trailers(http_code="teapot"))

    assert details.outcome is DetailOutcome.UNDECODABLE
    assert "http.code" in details.reason
