"""Test objects for Engine API calls.

Every helper builds a new object on each call so no test can alias another's data.
"""

from engine_client.encoding import pad_to, to_bytes32
from engine_client.types import (
    ExecutionBlock,
    ExecutionPayload,
    ForkchoiceState,
    ForkchoiceUpdatedResponse,
    PayloadAttributes,
    PayloadId,
    PayloadStatus,
    PayloadStatusEnum,
)


def foo() -> bytes:
    return to_bytes32(b"foo")


def execution_payload(**overrides) -> ExecutionPayload:
    fields = dict(
        parent_hash=foo(),
        fee_recipient=pad_to(b"bar", 20),
        state_root=foo(),
        receipts_root=foo(),
        logs_bloom=pad_to(b"baz", 256),
        prev_randao=foo(),
        block_number=1,
        gas_limit=1,
        gas_used=1,
        timestamp=1,
        extra_data=foo(),
        base_fee_per_gas=6,
        block_hash=foo(),
        transactions=(foo(),),
    )
    fields.update(overrides)
    return ExecutionPayload(**fields)


def execution_block(**overrides) -> ExecutionBlock:
    fields = dict(
        number=100,
        hash=to_bytes32(b"hash"),
        parent_hash=to_bytes32(b"parentHash"),
        sha3_uncles=to_bytes32(b"sha3Uncles"),
        miner=pad_to(b"miner", 20),
        state_root=to_bytes32(b"stateRoot"),
        transactions_root=to_bytes32(b"transactionsRoot"),
        receipts_root=to_bytes32(b"receiptsRoot"),
        logs_bloom=pad_to(b"logs", 256),
        difficulty=1,
        total_difficulty=2,
        gas_limit=3,
        gas_used=4,
        timestamp=5,
        size=6,
        extra_data=to_bytes32(b"extraData"),
        base_fee_per_gas=7,
        transactions=(foo(),),
        uncles=(foo(),),
    )
    fields.update(overrides)
    return ExecutionBlock(**fields)


def payload_status(**overrides) -> PayloadStatus:
    fields = dict(
        status=PayloadStatusEnum.ACCEPTED,
        latest_valid_hash=foo(),
        validation_error=None,
    )
    fields.update(overrides)
    return PayloadStatus(**fields)


def payload_id() -> PayloadId:
    return PayloadId(bytes([1, 0, 0, 0, 0, 0, 0, 0]))


def forkchoice_updated_response(with_payload_id: bool = True) -> ForkchoiceUpdatedResponse:
    return ForkchoiceUpdatedResponse(
        payload_status=payload_status(),
        payload_id=payload_id() if with_payload_id else None,
    )


def forkchoice_state() -> ForkchoiceState:
    return ForkchoiceState(
        head_block_hash=to_bytes32(b"head"),
        safe_block_hash=to_bytes32(b"safe"),
        finalized_block_hash=to_bytes32(b"finalized"),
    )


def payload_attributes() -> PayloadAttributes:
    return PayloadAttributes(
        timestamp=1,
        prev_randao=to_bytes32(b"random"),
        suggested_fee_recipient=pad_to(b"suggestedFeeRecipient", 20)[:20],
    )
