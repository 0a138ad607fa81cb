"""
Endpoint descriptors, request preparation and dispatch.
"""
from .dispatcher import AsyncEndpointDispatcher, EndpointDispatcher, decode_body, interpret_response
from .endpoint import EndpointDescriptor
from .path import build_url, path_template
from .request_builder import build_body, build_query, prepare_request

__all__ = [
    "AsyncEndpointDispatcher",
    "EndpointDispatcher",
    "decode_body",
    "interpret_response",
    "EndpointDescriptor",
    "build_url",
    "path_template",
    "build_body",
    "build_query",
    "prepare_request",
]
