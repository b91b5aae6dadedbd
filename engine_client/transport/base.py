"""Transport interface shared by the HTTP and IPC implementations."""

from abc import ABC, abstractmethod
from typing import Any

from ..errors import JSONRPCError, TransportError


def build_request(request_id: int, method: str, params: tuple) -> dict:
    return {
        "jsonrpc": "2.0",
        "method": method,
        "params": list(params),
        "id": request_id,
    }


def _valid_error_code(code: Any) -> bool:
    if isinstance(code, bool):
        return False
    if isinstance(code, int):
        return True
    if isinstance(code, str):
        try:
            int(code)
        except ValueError:
            return False
        return True
    return False


def parse_response(method: str, data: Any) -> Any:
    """Extract the result from a JSON-RPC response envelope.

    An envelope carrying an error member raises JSONRPCError, even when a
    (null) result member is present too.
    """
    if not isinstance(data, dict):
        raise TransportError(f"Malformed JSON-RPC response: {data!r}", method)
    if data.get("error") is not None:
        error = data["error"]
        if not isinstance(error, dict) or not _valid_error_code(error.get("code")):
            raise TransportError(f"Malformed JSON-RPC error member: {error!r}", method)
        raise JSONRPCError.from_dict(error)
    if "result" not in data:
        raise TransportError("JSON-RPC response has neither result nor error", method)
    return data["result"]


class Transport(ABC):
    """Invoke a named JSON-RPC method with positional params.

    Implementations raise JSONRPCError when the remote answered with an error
    object and TransportError for everything that prevented a response.
    """

    @abstractmethod
    async def call(self, method: str, *params: Any) -> Any:
        ...

    async def close(self) -> None:
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
