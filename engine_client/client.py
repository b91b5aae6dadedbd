"""Engine API client for communication with the execution layer."""

import asyncio
import logging
import time
from typing import Any, Callable, Optional

from . import metrics
from .config import DEFAULT_TIMEOUT, Config
from .encoding import HASH_LENGTH, check_length, encode_data
from .errors import (
    CallCancelledError,
    DecodeError,
    EngineAPIError,
    TransportError,
    handle_rpc_error,
)
from .transport import Transport, dial
from .types import (
    ExecutionBlock,
    ExecutionPayload,
    ForkchoiceState,
    ForkchoiceUpdatedResponse,
    PayloadAttributes,
    PayloadId,
    PayloadStatus,
)

logger = logging.getLogger(__name__)

NEW_PAYLOAD_METHOD = "engine_newPayloadV1"
FORKCHOICE_UPDATED_METHOD = "engine_forkchoiceUpdatedV1"
GET_PAYLOAD_METHOD = "engine_getPayloadV1"
EXECUTION_BLOCK_BY_HASH_METHOD = "eth_getBlockByHash"
EXECUTION_BLOCK_BY_NUMBER_METHOD = "eth_getBlockByNumber"

LATEST_BLOCK_TAG = "latest"
FULL_TRANSACTIONS = True

_DECODE_ERRORS = (AttributeError, KeyError, TypeError, ValueError)


class EngineClient:
    """Client for the Engine API methods a consensus node needs.

    Each coroutine performs exactly one round trip and raises an
    EngineAPIError subclass on failure. Nothing is retried or cached.
    """

    def __init__(self, transport: Transport, timeout: Optional[float] = DEFAULT_TIMEOUT):
        self.transport = transport
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: Config) -> "EngineClient":
        return cls(dial(config.endpoint, config.jwt_secret), timeout=config.timeout)

    async def _call(self, method: str, params: list, timeout: Optional[float]) -> Any:
        if timeout is not None and timeout <= 0:
            raise CallCancelledError(method, timeout)

        logger.debug(f"Engine API call: {method}")
        try:
            return await asyncio.wait_for(self.transport.call(method, *params), timeout)
        except asyncio.TimeoutError as e:
            logger.warning(f"Engine API call {method} timed out after {timeout}s")
            raise CallCancelledError(method, timeout) from e
        except TransportError as e:
            logger.error(f"Engine API transport error: {e}")
            raise
        except Exception as e:
            rpc_error = handle_rpc_error(e)
            logger.warning(f"Engine API error for {method}: {rpc_error}")
            raise rpc_error from e

    async def _request(
        self,
        method: str,
        params: list,
        decode: Callable[[Any], Any],
        timeout: Optional[float] = None,
        nullable: bool = False,
    ) -> Any:
        if timeout is None:
            timeout = self.timeout

        start_time = time.monotonic()
        error_type = None
        try:
            result = await self._call(method, params, timeout)
            if result is None:
                if nullable:
                    return None
                raise DecodeError(method, "result is null")
            try:
                return decode(result)
            except _DECODE_ERRORS as e:
                raise DecodeError(method, f"{type(e).__name__}: {e}") from e
        except EngineAPIError as e:
            error_type = type(e).__name__
            raise
        except asyncio.CancelledError:
            error_type = "CancelledError"
            raise
        finally:
            metrics.record_engine_api_call(method, time.monotonic() - start_time, error_type)

    async def get_payload(
        self, payload_id: PayloadId, timeout: Optional[float] = None
    ) -> ExecutionPayload:
        """Get an execution payload previously requested through forkchoice_updated."""
        return await self._request(
            GET_PAYLOAD_METHOD,
            [PayloadId(payload_id).to_hex()],
            ExecutionPayload.from_dict,
            timeout,
        )

    async def forkchoice_updated(
        self,
        forkchoice_state: ForkchoiceState,
        payload_attributes: Optional[PayloadAttributes] = None,
        timeout: Optional[float] = None,
    ) -> ForkchoiceUpdatedResponse:
        """Update the forkchoice state, starting a payload build if attributes are given."""
        params = [
            forkchoice_state.to_dict(),
            payload_attributes.to_dict() if payload_attributes is not None else None,
        ]
        return await self._request(
            FORKCHOICE_UPDATED_METHOD,
            params,
            ForkchoiceUpdatedResponse.from_dict,
            timeout,
        )

    async def new_payload(
        self, execution_payload: ExecutionPayload, timeout: Optional[float] = None
    ) -> PayloadStatus:
        """Send a new payload to the execution layer for validation."""
        payload_dict = execution_payload.to_dict()
        logger.debug(
            f"newPayload: blockHash={payload_dict['blockHash']}, "
            f"blockNumber={execution_payload.block_number}, "
            f"tx_count={len(execution_payload.transactions)}"
        )
        return await self._request(
            NEW_PAYLOAD_METHOD,
            [payload_dict],
            PayloadStatus.from_dict,
            timeout,
        )

    async def latest_execution_block(
        self, timeout: Optional[float] = None
    ) -> Optional[ExecutionBlock]:
        """Get the latest execution block, or None if the node has none."""
        return await self._request(
            EXECUTION_BLOCK_BY_NUMBER_METHOD,
            [LATEST_BLOCK_TAG, FULL_TRANSACTIONS],
            ExecutionBlock.from_dict,
            timeout,
            nullable=True,
        )

    async def execution_block_by_hash(
        self, block_hash: bytes, timeout: Optional[float] = None
    ) -> Optional[ExecutionBlock]:
        """Get an execution block by hash, or None if the node does not know it."""
        check_length("block_hash", block_hash, HASH_LENGTH)
        return await self._request(
            EXECUTION_BLOCK_BY_HASH_METHOD,
            [encode_data(block_hash), FULL_TRANSACTIONS],
            ExecutionBlock.from_dict,
            timeout,
            nullable=True,
        )

    async def close(self) -> None:
        """Close the underlying transport."""
        await self.transport.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
