"""Operation-level tests for EngineClient, run against both the HTTP and IPC transports."""

import asyncio
import time

import pytest

from engine_client import (
    CallCancelledError,
    DecodeError,
    ExecutionBlock,
    ExecutionPayload,
    ForkchoiceState,
    InternalError,
    InvalidParamsError,
    MethodNotFoundError,
    PayloadAttributes,
    PayloadId,
    PayloadStatusEnum,
    ServerError,
    TransportError,
    UnexpectedError,
    UnknownPayloadError,
)
from engine_client.encoding import to_bytes32

from . import fixtures


@pytest.mark.asyncio
async def test_get_payload(client, service):
    resp = await client.get_payload(fixtures.payload_id())

    assert resp == fixtures.execution_payload()
    request = service.requests[-1]
    assert request["method"] == "engine_getPayloadV1"
    assert request["params"] == ["0x0100000000000000"]


@pytest.mark.asyncio
async def test_forkchoice_updated_with_attributes(client, service):
    state = fixtures.forkchoice_state()
    attributes = fixtures.payload_attributes()

    resp = await client.forkchoice_updated(state, attributes)

    want = fixtures.forkchoice_updated_response()
    assert resp.payload_status == want.payload_status
    assert resp.payload_id == want.payload_id
    assert resp.payload_id is not None

    assert service.requests[-1]["method"] == "engine_forkchoiceUpdatedV1"
    sent_state, sent_attributes = service.params()
    assert ForkchoiceState.from_dict(sent_state) == state
    assert PayloadAttributes.from_dict(sent_attributes) == attributes


@pytest.mark.asyncio
async def test_forkchoice_updated_without_attributes(client, service):
    resp = await client.forkchoice_updated(fixtures.forkchoice_state())

    assert resp.payload_id is None
    assert resp.payload_status == fixtures.payload_status()
    # The attributes slot is sent as an explicit null, never dropped.
    params = service.params()
    assert len(params) == 2
    assert params[1] is None


@pytest.mark.asyncio
async def test_new_payload(client, service):
    payload = fixtures.execution_payload()

    resp = await client.new_payload(payload)

    assert resp == fixtures.payload_status()
    assert resp.status == PayloadStatusEnum.ACCEPTED
    assert resp.validation_error is None
    assert service.requests[-1]["method"] == "engine_newPayloadV1"
    assert ExecutionPayload.from_dict(service.params()[0]) == payload


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides",
    [
        {"extra_data": b"", "transactions": ()},
        {"extra_data": b"\xff" * 32, "transactions": (b"", b"\x02" * 1024)},
        {"base_fee_per_gas": 2**256 - 1, "block_number": 0, "gas_used": 0},
    ],
    ids=["empty", "max-extra-data", "uint256-base-fee"],
)
async def test_new_payload_params_round_trip(client, service, overrides):
    payload = fixtures.execution_payload(**overrides)

    await client.new_payload(payload)

    assert ExecutionPayload.from_dict(service.params()[0]) == payload


@pytest.mark.asyncio
async def test_latest_execution_block(client, service):
    resp = await client.latest_execution_block()

    assert resp == fixtures.execution_block()
    request = service.requests[-1]
    assert request["method"] == "eth_getBlockByNumber"
    assert request["params"] == ["latest", True]


@pytest.mark.asyncio
async def test_execution_block_by_hash(client, service):
    block_hash = to_bytes32(b"foo")

    resp = await client.execution_block_by_hash(block_hash)

    assert resp == fixtures.execution_block()
    request = service.requests[-1]
    assert request["method"] == "eth_getBlockByHash"
    assert request["params"] == ["0x" + block_hash.hex(), True]


@pytest.mark.asyncio
async def test_execution_block_full_transaction_objects(client, service):
    block = fixtures.execution_block().to_dict()
    tx_hash = block["transactions"][0]
    block["transactions"] = [{"hash": tx_hash, "nonce": "0x0", "input": "0x"}]
    service.results["eth_getBlockByNumber"] = block

    resp = await client.latest_execution_block()

    assert resp.transactions == (to_bytes32(b"foo"),)


@pytest.mark.asyncio
async def test_block_lookup_null_result(client, service):
    service.results["eth_getBlockByHash"] = None

    assert await client.execution_block_by_hash(to_bytes32(b"missing")) is None


@pytest.mark.asyncio
async def test_engine_method_null_result_is_decode_error(client, service):
    service.results["engine_newPayloadV1"] = None

    with pytest.raises(DecodeError) as exc_info:
        await client.new_payload(fixtures.execution_payload())
    assert exc_info.value.method == "engine_newPayloadV1"


@pytest.mark.asyncio
async def test_malformed_result_is_decode_error(client, service):
    result = fixtures.execution_payload().to_dict()
    del result["blockHash"]
    service.results["engine_getPayloadV1"] = result

    with pytest.raises(DecodeError) as exc_info:
        await client.get_payload(fixtures.payload_id())
    assert exc_info.value.method == "engine_getPayloadV1"
    assert "blockHash" in str(exc_info.value)


@pytest.mark.asyncio
async def test_wrong_length_field_is_decode_error(client, service):
    result = fixtures.execution_block().to_dict()
    result["hash"] = "0x1234"
    service.results["eth_getBlockByNumber"] = result

    with pytest.raises(DecodeError):
        await client.latest_execution_block()


@pytest.mark.asyncio
@pytest.mark.parametrize("number", ["0x-5", "0x1_0", "0x 1"])
async def test_non_hex_quantity_is_decode_error(client, service, number):
    result = fixtures.execution_block().to_dict()
    result["number"] = number
    service.results["eth_getBlockByNumber"] = result

    with pytest.raises(DecodeError):
        await client.latest_execution_block()


@pytest.mark.asyncio
async def test_unknown_status_is_decode_error(client, service):
    service.results["engine_newPayloadV1"] = {"status": "MAYBE"}

    with pytest.raises(DecodeError):
        await client.new_payload(fixtures.execution_payload())


@pytest.mark.asyncio
async def test_unknown_payload_error(client, service):
    service.errors["engine_getPayloadV1"] = {"code": -32001, "message": "Unknown payload"}

    with pytest.raises(UnknownPayloadError) as exc_info:
        await client.get_payload(fixtures.payload_id())
    assert exc_info.value.original_message == "Unknown payload"
    assert "Unknown payload" in str(exc_info.value)


@pytest.mark.asyncio
async def test_invalid_params_error(client, service):
    service.errors["engine_forkchoiceUpdatedV1"] = {"code": -32602, "message": "bad head"}

    with pytest.raises(InvalidParamsError, match="bad head"):
        await client.forkchoice_updated(fixtures.forkchoice_state())


@pytest.mark.asyncio
async def test_method_not_found_error(client, service):
    del service.results["eth_getBlockByHash"]

    with pytest.raises(MethodNotFoundError, match="eth_getBlockByHash"):
        await client.execution_block_by_hash(to_bytes32(b"foo"))


@pytest.mark.asyncio
async def test_server_error_requires_data(client, service):
    service.errors["engine_newPayloadV1"] = {
        "code": -32000,
        "message": "boom",
        "data": {"err": "state missing"},
    }
    with pytest.raises(ServerError) as exc_info:
        await client.new_payload(fixtures.execution_payload())
    assert exc_info.value.data == {"err": "state missing"}

    service.errors["engine_newPayloadV1"] = {"code": -32000, "message": "boom"}
    with pytest.raises(UnexpectedError) as exc_info:
        await client.new_payload(fixtures.execution_payload())
    assert not isinstance(exc_info.value, ServerError)
    assert exc_info.value.code == -32000


@pytest.mark.asyncio
async def test_error_envelope_with_null_result_is_not_success(client, service):
    service.raw["eth_getBlockByNumber"] = {
        "jsonrpc": "2.0",
        "result": None,
        "error": {"code": -32603, "message": "db closed"},
    }

    with pytest.raises(InternalError) as exc_info:
        await client.latest_execution_block()
    assert "db closed" in str(exc_info.value)
    assert exc_info.value.original_message == "db closed"


@pytest.mark.asyncio
async def test_unknown_error_code(client, service):
    service.errors["engine_getPayloadV1"] = {"code": -32099, "message": "weird"}

    with pytest.raises(UnexpectedError) as exc_info:
        await client.get_payload(fixtures.payload_id())
    assert exc_info.value.code == -32099
    assert "weird" in str(exc_info.value)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        {"code": "abc", "message": "x"},
        {"code": None, "message": "x"},
        {"message": "x"},
    ],
)
async def test_malformed_error_member_is_transport_error(client, service, error):
    service.errors["engine_getPayloadV1"] = error

    with pytest.raises(TransportError) as exc_info:
        await client.get_payload(fixtures.payload_id())
    assert exc_info.value.method == "engine_getPayloadV1"
    assert "'x'" in str(exc_info.value)


@pytest.mark.asyncio
async def test_expired_deadline_skips_remote_call(client, service):
    with pytest.raises(CallCancelledError):
        await client.latest_execution_block(timeout=0)
    assert service.requests == []


@pytest.mark.asyncio
async def test_deadline_fires_before_response(client, service):
    service.delays["engine_newPayloadV1"] = 1.0

    start = time.monotonic()
    with pytest.raises(CallCancelledError) as exc_info:
        await client.new_payload(fixtures.execution_payload(), timeout=0.1)
    assert time.monotonic() - start < 0.8
    assert exc_info.value.method == "engine_newPayloadV1"


@pytest.mark.asyncio
async def test_task_cancellation_returns_promptly(client, service):
    service.delays["engine_getPayloadV1"] = 1.0

    task = asyncio.create_task(client.get_payload(fixtures.payload_id()))
    while not service.requests:
        await asyncio.sleep(0.01)
    start = time.monotonic()
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert time.monotonic() - start < 0.5


@pytest.mark.asyncio
async def test_concurrent_calls(client, service):
    service.delays["eth_getBlockByNumber"] = 0.2

    block, status = await asyncio.gather(
        client.latest_execution_block(),
        client.new_payload(fixtures.execution_payload()),
    )

    assert isinstance(block, ExecutionBlock)
    assert status == fixtures.payload_status()


@pytest.mark.asyncio
async def test_get_payload_accepts_raw_bytes(client, service):
    resp = await client.get_payload(bytes([1, 0, 0, 0, 0, 0, 0, 0]))

    assert resp == fixtures.execution_payload()
    assert PayloadId.from_hex(service.params()[0]) == fixtures.payload_id()
