"""Engine API errors and JSON-RPC error classification.

Every failure surfaced by EngineClient is an EngineAPIError:

- TransportError: the request never produced a JSON-RPC response (connection, IO, framing)
- DecodeError: a result came back but did not match the expected shape
- RPCError subclasses: the remote node answered with a JSON-RPC error object
- CallCancelledError: the call deadline expired before a response arrived
"""

from enum import Enum
from typing import Any, Optional, Union

_NO_DATA = object()


class JSONRPCError(Exception):
    """Raw JSON-RPC error object as raised by a transport, before classification."""

    def __init__(self, code: Union[int, str], message: str = "", data: Any = _NO_DATA):
        self.code = int(code)
        self.message = message
        self._data = data
        super().__init__(message)

    @property
    def has_data(self) -> bool:
        return self._data is not _NO_DATA

    @property
    def data(self) -> Any:
        return None if self._data is _NO_DATA else self._data

    @classmethod
    def from_dict(cls, error: dict) -> "JSONRPCError":
        return cls(
            error["code"],
            error.get("message", ""),
            error["data"] if "data" in error else _NO_DATA,
        )

    def __str__(self) -> str:
        return f"JSONRPCError(code={self.code}, message={self.message})"


class EngineAPIError(Exception):
    """Base class for every error raised by the Engine API client."""


class TransportError(EngineAPIError):
    """Connection or IO failure while talking to the execution client."""

    def __init__(self, message: str, method: Optional[str] = None):
        self.method = method
        self.message = message
        super().__init__(f"{method}: {message}" if method else message)


class DecodeError(EngineAPIError):
    """Response result does not match the expected shape."""

    def __init__(self, method: str, message: str):
        self.method = method
        self.message = message
        super().__init__(f"Could not decode {method} result: {message}")


class CallCancelledError(EngineAPIError):
    """Call deadline expired before the execution client answered."""

    def __init__(self, method: str, timeout: Optional[float] = None):
        self.method = method
        self.timeout = timeout
        if timeout is not None and timeout <= 0:
            detail = "deadline already expired"
        elif timeout is not None:
            detail = f"deadline of {timeout}s exceeded"
        else:
            detail = "cancelled"
        super().__init__(f"{method} cancelled: {detail}")


class RPCError(EngineAPIError):
    """JSON-RPC error returned by the execution client."""

    code: Optional[int] = None
    description = "rpc error"

    def __init__(self, original_message: str, code: Optional[int] = None):
        self.original_message = original_message
        if code is not None:
            self.code = code
        super().__init__(f"{self.description}: {original_message}")


class ParseError(RPCError):
    code = -32700
    description = "invalid JSON was received by the server"


class InvalidRequestError(RPCError):
    code = -32600
    description = "JSON sent is not valid request object"


class MethodNotFoundError(RPCError):
    code = -32601
    description = "method not found"


class InvalidParamsError(RPCError):
    code = -32602
    description = "invalid method parameter(s)"


class InternalError(RPCError):
    code = -32603
    description = "internal JSON-RPC error"


class UnknownPayloadError(RPCError):
    code = -32001
    description = "payload does not exist or is not available"


class ServerError(RPCError):
    code = -32000
    description = "client error while processing request"

    def __init__(self, original_message: str, data: Any = None):
        self.data = data
        super().__init__(original_message)

    def __str__(self) -> str:
        return f"{super().__str__()} (data: {self.data!r})"


class UnexpectedError(RPCError):
    """Error that maps to no known kind. Also used for errors without a code."""

    description = "got an unexpected error"

    def __init__(self, original_message: str, code: Optional[int] = None):
        super().__init__(original_message, code)
        if code is not None:
            self.args = (f"{self.description} (code {code}): {original_message}",)


class ErrorShape(Enum):
    NO_CODE = "no_code"
    CODE_ONLY = "code_only"
    CODE_WITH_DATA = "code_with_data"


def error_shape(err: BaseException) -> ErrorShape:
    if not isinstance(err, JSONRPCError):
        return ErrorShape.NO_CODE
    if err.has_data:
        return ErrorShape.CODE_WITH_DATA
    return ErrorShape.CODE_ONLY


_ERRORS_BY_CODE: dict[int, type[RPCError]] = {
    cls.code: cls
    for cls in (
        ParseError,
        InvalidRequestError,
        MethodNotFoundError,
        InvalidParamsError,
        InternalError,
        UnknownPayloadError,
    )
}


def handle_rpc_error(err: Optional[BaseException]) -> Optional[RPCError]:
    """Classify a raw call failure into a single RPCError kind.

    Only JSONRPCError exposes a code. Anything else is an UnexpectedError that
    keeps the original message. Code -32000 is a ServerError only when the
    remote attached data to it.
    """
    if err is None:
        return None
    shape = error_shape(err)
    if shape is ErrorShape.NO_CODE:
        return UnexpectedError(str(err))

    code = err.code
    message = err.message
    if code in _ERRORS_BY_CODE:
        return _ERRORS_BY_CODE[code](message)
    # -32000 without data stays unexpected.
    if code == ServerError.code and shape is ErrorShape.CODE_WITH_DATA:
        return ServerError(message, err.data)
    return UnexpectedError(message, code)
