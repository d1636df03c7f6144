#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Sidecar wire protocol (protobuf messages and gRPC stub).
"""

from . import dapr_pb2, dapr_pb2_grpc

__all__ = ["dapr_pb2", "dapr_pb2_grpc"]
