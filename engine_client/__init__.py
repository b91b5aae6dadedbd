"""Engine API client for driving an execution layer node from a consensus node."""

from .client import EngineClient
from .config import Config
from .errors import (
    CallCancelledError,
    DecodeError,
    EngineAPIError,
    InternalError,
    InvalidParamsError,
    InvalidRequestError,
    JSONRPCError,
    MethodNotFoundError,
    ParseError,
    RPCError,
    ServerError,
    TransportError,
    UnexpectedError,
    UnknownPayloadError,
    handle_rpc_error,
)
from .transport import HTTPTransport, IPCTransport, Transport, dial
from .types import (
    ExecutionBlock,
    ExecutionPayload,
    ForkchoiceState,
    ForkchoiceUpdatedResponse,
    PayloadAttributes,
    PayloadId,
    PayloadStatus,
    PayloadStatusEnum,
)

__all__ = [
    "CallCancelledError",
    "Config",
    "DecodeError",
    "EngineAPIError",
    "EngineClient",
    "ExecutionBlock",
    "ExecutionPayload",
    "ForkchoiceState",
    "ForkchoiceUpdatedResponse",
    "HTTPTransport",
    "IPCTransport",
    "InternalError",
    "InvalidParamsError",
    "InvalidRequestError",
    "JSONRPCError",
    "MethodNotFoundError",
    "ParseError",
    "PayloadAttributes",
    "PayloadId",
    "PayloadStatus",
    "PayloadStatusEnum",
    "RPCError",
    "ServerError",
    "Transport",
    "TransportError",
    "UnexpectedError",
    "UnknownPayloadError",
    "dial",
    "handle_rpc_error",
]
