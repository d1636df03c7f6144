#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Client stub and servicer base for the ``dapr.proto.runtime.v1.Dapr`` service.
"""

import grpc

from . import dapr_pb2

SERVICE_NAME = "dapr.proto.runtime.v1.Dapr"

# method name -> (request class, response class)
_METHODS = {
    "InvokeService": (dapr_pb2.InvokeServiceRequest, dapr_pb2.InvokeResponse),
    "GetState": (dapr_pb2.GetStateRequest, dapr_pb2.GetStateResponse),
    "GetBulkState": (dapr_pb2.GetBulkStateRequest, dapr_pb2.GetBulkStateResponse),
    "SaveState": (dapr_pb2.SaveStateRequest, dapr_pb2.Empty),
    "DeleteState": (dapr_pb2.DeleteStateRequest, dapr_pb2.Empty),
    "ExecuteStateTransaction": (dapr_pb2.ExecuteStateTransactionRequest, dapr_pb2.Empty),
    "PublishEvent": (dapr_pb2.PublishEventRequest, dapr_pb2.Empty),
    "InvokeBinding": (dapr_pb2.InvokeBindingRequest, dapr_pb2.InvokeBindingResponse),
    "GetSecret": (dapr_pb2.GetSecretRequest, dapr_pb2.GetSecretResponse),
}


def method_path(method: str) -> str:
    return "/{0}/{1}".format(SERVICE_NAME, method)


class DaprStub(object):
    """
    Unary-unary callables for every sidecar method daprlink uses.

    Works with both ``grpc.Channel`` and ``grpc.aio.Channel``.
    """

    def __init__(self, channel):
        for method, (request_cls, response_cls) in _METHODS.items():
            setattr(
                self,
                method,
                channel.unary_unary(
                    method_path(method),
                    request_serializer=request_cls.SerializeToString,
                    response_deserializer=response_cls.FromString,
                ),
            )


class DaprServicer(object):
    """
    Base servicer. Unimplemented methods answer UNIMPLEMENTED.
    """

    def _unimplemented(self, context):
        context.set_code(grpc.StatusCode.UNIMPLEMENTED)
        context.set_details("Method not implemented!")
        raise NotImplementedError("Method not implemented!")

    def InvokeService(self, request, context):
        self._unimplemented(context)

    def GetState(self, request, context):
        self._unimplemented(context)

    def GetBulkState(self, request, context):
        self._unimplemented(context)

    def SaveState(self, request, context):
        self._unimplemented(context)

    def DeleteState(self, request, context):
        self._unimplemented(context)

    def ExecuteStateTransaction(self, request, context):
        self._unimplemented(context)

    def PublishEvent(self, request, context):
        self._unimplemented(context)

    def InvokeBinding(self, request, context):
        self._unimplemented(context)

    def GetSecret(self, request, context):
        self._unimplemented(context)


def add_DaprServicer_to_server(servicer, server):
    rpc_method_handlers = {
        method: grpc.unary_unary_rpc_method_handler(
            getattr(servicer, method),
            request_deserializer=request_cls.FromString,
            response_serializer=response_cls.SerializeToString,
        )
        for method, (request_cls, response_cls) in _METHODS.items()
    }
    generic_handler = grpc.method_handlers_generic_handler(
        SERVICE_NAME, rpc_method_handlers
    )
    server.add_generic_rpc_handlers((generic_handler,))
