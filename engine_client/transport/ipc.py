"""JSON-RPC over a local Unix domain socket.

Requests and responses are newline-delimited JSON envelopes. A single reader
task owns the socket's read side and hands each response to the call waiting
on its id, so concurrent calls can share one connection.
"""

import asyncio
import json
import logging
from itertools import count
from typing import Any, Optional

from ..errors import TransportError
from .base import Transport, build_request, parse_response

logger = logging.getLogger(__name__)

# Engine API payloads can carry large transaction lists.
READ_LIMIT = 64 * 1024 * 1024


class IPCTransport(Transport):
    """Engine API transport over an IPC socket."""

    def __init__(self, path: str):
        self.path = path
        self._reader: Optional[asyncio.StreamReader] = None
        self._writer: Optional[asyncio.StreamWriter] = None
        self._read_task: Optional[asyncio.Task] = None
        self._pending: dict[int, asyncio.Future] = {}
        self._request_ids = count(1)
        self._connect_lock = asyncio.Lock()
        self._write_lock = asyncio.Lock()

    @property
    def connected(self) -> bool:
        return self._writer is not None and not self._writer.is_closing()

    async def _ensure_connection(self, method: str) -> asyncio.StreamWriter:
        async with self._connect_lock:
            if not self.connected:
                try:
                    reader, writer = await asyncio.open_unix_connection(
                        self.path, limit=READ_LIMIT
                    )
                except OSError as e:
                    raise TransportError(f"Cannot connect to IPC socket {self.path}: {e}", method) from e
                self._reader, self._writer = reader, writer
                self._read_task = asyncio.create_task(self._read_loop(reader, writer))
                logger.debug(f"Connected to IPC socket {self.path}")
            return self._writer

    async def _read_loop(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        error = TransportError("IPC connection closed by peer")
        try:
            while True:
                line = await reader.readline()
                if not line:
                    break
                if line.strip():
                    self._dispatch(line)
        except (OSError, ValueError) as e:
            error = TransportError(f"IPC read failed: {e}")
        finally:
            if self._writer is writer:
                self._reader = None
                self._writer = None
                writer.close()
            self._fail_pending(error)

    def _dispatch(self, line: bytes) -> None:
        try:
            message = json.loads(line)
        except ValueError as e:
            logger.error(f"Dropping malformed IPC message: {e}")
            return
        if not isinstance(message, dict):
            logger.error(f"Dropping non-object IPC message: {message!r}")
            return
        request_id = message.get("id")
        future = self._pending.pop(request_id, None) if isinstance(request_id, int) else None
        if future is None:
            logger.debug(f"Dropping IPC response for unknown id {request_id!r}")
            return
        if not future.done():
            future.set_result(message)

    def _fail_pending(self, error: TransportError) -> None:
        pending, self._pending = self._pending, {}
        for future in pending.values():
            if not future.done():
                future.set_exception(error)

    async def call(self, method: str, *params: Any) -> Any:
        writer = await self._ensure_connection(method)
        request_id = next(self._request_ids)

        try:
            line = json.dumps(build_request(request_id, method, params)).encode() + b"\n"
        except (TypeError, ValueError) as e:
            raise TransportError(f"Cannot encode request params: {e}", method) from e

        future = asyncio.get_running_loop().create_future()
        self._pending[request_id] = future
        try:
            async with self._write_lock:
                writer.write(line)
                await writer.drain()
            response = await future
        except OSError as e:
            raise TransportError(f"IPC write failed: {e}", method) from e
        except TransportError as e:
            raise TransportError(e.message, method) from e
        finally:
            self._pending.pop(request_id, None)

        return parse_response(method, response)

    async def close(self) -> None:
        """Close the socket and fail any call still waiting for a response."""
        writer, self._writer, self._reader = self._writer, None, None
        self._fail_pending(TransportError("IPC transport closed"))
        if self._read_task:
            self._read_task.cancel()
            try:
                await self._read_task
            except asyncio.CancelledError:
                pass
            self._read_task = None
        if writer is not None:
            writer.close()
            try:
                await writer.wait_closed()
            except OSError:
                pass
