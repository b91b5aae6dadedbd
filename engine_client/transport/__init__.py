"""Transports carrying Engine API JSON-RPC calls to the execution client."""

from typing import Optional

from .base import Transport, build_request, parse_response
from .http import HTTPTransport
from .ipc import IPCTransport


def dial(endpoint: str, jwt_secret: Optional[bytes] = None) -> Transport:
    """Create a transport for an endpoint.

    http:// and https:// URLs use HTTP, anything else is an IPC socket path.
    """
    if endpoint.startswith(("http://", "https://")):
        return HTTPTransport(endpoint, jwt_secret=jwt_secret)
    return IPCTransport(endpoint)


__all__ = [
    "HTTPTransport",
    "IPCTransport",
    "Transport",
    "build_request",
    "dial",
    "parse_response",
]
