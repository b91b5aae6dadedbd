"""Engine API data types."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from .encoding import (
    ADDRESS_LENGTH,
    HASH_LENGTH,
    LOGS_BLOOM_LENGTH,
    MAX_EXTRA_DATA_BYTES,
    PAYLOAD_ID_LENGTH,
    UINT256_MAX,
    check_length,
    check_uint64,
    decode_data,
    decode_quantity,
    encode_data,
    encode_quantity,
)


class PayloadId(bytes):
    """8-byte identifier returned by forkchoiceUpdated and consumed by getPayload."""

    def __new__(cls, value: bytes):
        check_length("PayloadId", value, PAYLOAD_ID_LENGTH)
        return super().__new__(cls, value)

    @classmethod
    def from_hex(cls, value: str) -> "PayloadId":
        return cls(decode_data(value, PAYLOAD_ID_LENGTH))

    def to_hex(self) -> str:
        return encode_data(self)

    def __repr__(self) -> str:
        return f"PayloadId({self.to_hex()})"


class PayloadStatusEnum(str, Enum):
    VALID = "VALID"
    INVALID = "INVALID"
    SYNCING = "SYNCING"
    ACCEPTED = "ACCEPTED"
    INVALID_BLOCK_HASH = "INVALID_BLOCK_HASH"

    @property
    def is_rejection(self) -> bool:
        return self in (PayloadStatusEnum.INVALID, PayloadStatusEnum.INVALID_BLOCK_HASH)


@dataclass(frozen=True)
class ExecutionPayload:
    """Execution block body as built by the EL or submitted by the CL."""

    parent_hash: bytes
    fee_recipient: bytes
    state_root: bytes
    receipts_root: bytes
    logs_bloom: bytes
    prev_randao: bytes
    block_number: int
    gas_limit: int
    gas_used: int
    timestamp: int
    extra_data: bytes
    base_fee_per_gas: int
    block_hash: bytes
    transactions: tuple[bytes, ...] = ()

    def __post_init__(self):
        check_length("parent_hash", self.parent_hash, HASH_LENGTH)
        check_length("fee_recipient", self.fee_recipient, ADDRESS_LENGTH)
        check_length("state_root", self.state_root, HASH_LENGTH)
        check_length("receipts_root", self.receipts_root, HASH_LENGTH)
        check_length("logs_bloom", self.logs_bloom, LOGS_BLOOM_LENGTH)
        check_length("prev_randao", self.prev_randao, HASH_LENGTH)
        check_length("block_hash", self.block_hash, HASH_LENGTH)
        for name in ("block_number", "gas_limit", "gas_used", "timestamp"):
            check_uint64(name, getattr(self, name))
        if len(self.extra_data) > MAX_EXTRA_DATA_BYTES:
            raise ValueError(
                f"extra_data must be at most {MAX_EXTRA_DATA_BYTES} bytes, got {len(self.extra_data)}"
            )
        if not 0 <= self.base_fee_per_gas <= UINT256_MAX:
            raise ValueError(f"base_fee_per_gas out of uint256 range: {self.base_fee_per_gas}")
        # Lists passed by callers are frozen into tuples.
        object.__setattr__(self, "transactions", tuple(bytes(tx) for tx in self.transactions))

    def to_dict(self) -> dict:
        return {
            "parentHash": encode_data(self.parent_hash),
            "feeRecipient": encode_data(self.fee_recipient),
            "stateRoot": encode_data(self.state_root),
            "receiptsRoot": encode_data(self.receipts_root),
            "logsBloom": encode_data(self.logs_bloom),
            "prevRandao": encode_data(self.prev_randao),
            "blockNumber": encode_quantity(self.block_number),
            "gasLimit": encode_quantity(self.gas_limit),
            "gasUsed": encode_quantity(self.gas_used),
            "timestamp": encode_quantity(self.timestamp),
            "extraData": encode_data(self.extra_data),
            "baseFeePerGas": encode_quantity(self.base_fee_per_gas),
            "blockHash": encode_data(self.block_hash),
            "transactions": [encode_data(tx) for tx in self.transactions],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ExecutionPayload":
        return cls(
            parent_hash=decode_data(data["parentHash"], HASH_LENGTH),
            fee_recipient=decode_data(data["feeRecipient"], ADDRESS_LENGTH),
            state_root=decode_data(data["stateRoot"], HASH_LENGTH),
            receipts_root=decode_data(data["receiptsRoot"], HASH_LENGTH),
            logs_bloom=decode_data(data["logsBloom"], LOGS_BLOOM_LENGTH),
            prev_randao=decode_data(data["prevRandao"], HASH_LENGTH),
            block_number=decode_quantity(data["blockNumber"]),
            gas_limit=decode_quantity(data["gasLimit"]),
            gas_used=decode_quantity(data["gasUsed"]),
            timestamp=decode_quantity(data["timestamp"]),
            extra_data=decode_data(data["extraData"]),
            base_fee_per_gas=decode_quantity(data["baseFeePerGas"]),
            block_hash=decode_data(data["blockHash"], HASH_LENGTH),
            transactions=tuple(decode_data(tx) for tx in data["transactions"]),
        )


@dataclass(frozen=True)
class ForkchoiceState:
    """Forkchoice state for forkchoiceUpdated."""

    head_block_hash: bytes
    safe_block_hash: bytes
    finalized_block_hash: bytes

    def __post_init__(self):
        check_length("head_block_hash", self.head_block_hash, HASH_LENGTH)
        check_length("safe_block_hash", self.safe_block_hash, HASH_LENGTH)
        check_length("finalized_block_hash", self.finalized_block_hash, HASH_LENGTH)

    def to_dict(self) -> dict:
        return {
            "headBlockHash": encode_data(self.head_block_hash),
            "safeBlockHash": encode_data(self.safe_block_hash),
            "finalizedBlockHash": encode_data(self.finalized_block_hash),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ForkchoiceState":
        return cls(
            head_block_hash=decode_data(data["headBlockHash"], HASH_LENGTH),
            safe_block_hash=decode_data(data["safeBlockHash"], HASH_LENGTH),
            finalized_block_hash=decode_data(data["finalizedBlockHash"], HASH_LENGTH),
        )


@dataclass(frozen=True)
class PayloadAttributes:
    """Build request attached to forkchoiceUpdated."""

    timestamp: int
    prev_randao: bytes
    suggested_fee_recipient: bytes

    def __post_init__(self):
        check_length("prev_randao", self.prev_randao, HASH_LENGTH)
        check_length("suggested_fee_recipient", self.suggested_fee_recipient, ADDRESS_LENGTH)
        check_uint64("timestamp", self.timestamp)

    def to_dict(self) -> dict:
        return {
            "timestamp": encode_quantity(self.timestamp),
            "prevRandao": encode_data(self.prev_randao),
            "suggestedFeeRecipient": encode_data(self.suggested_fee_recipient),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PayloadAttributes":
        return cls(
            timestamp=decode_quantity(data["timestamp"]),
            prev_randao=decode_data(data["prevRandao"], HASH_LENGTH),
            suggested_fee_recipient=decode_data(data["suggestedFeeRecipient"], ADDRESS_LENGTH),
        )


@dataclass(frozen=True)
class PayloadStatus:
    """Response from newPayload, also nested in forkchoiceUpdated responses."""

    status: PayloadStatusEnum
    latest_valid_hash: Optional[bytes] = None
    validation_error: Optional[str] = None

    def __post_init__(self):
        if self.latest_valid_hash is not None:
            check_length("latest_valid_hash", self.latest_valid_hash, HASH_LENGTH)
        if self.validation_error is not None and not self.status.is_rejection:
            raise ValueError(
                f"validation_error is only allowed for rejected payloads, status is {self.status.value}"
            )

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "latestValidHash": (
                encode_data(self.latest_valid_hash) if self.latest_valid_hash is not None else None
            ),
            "validationError": self.validation_error,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PayloadStatus":
        return cls(
            status=PayloadStatusEnum(data["status"]),
            latest_valid_hash=(
                decode_data(data["latestValidHash"], HASH_LENGTH)
                if data.get("latestValidHash")
                else None
            ),
            validation_error=data.get("validationError") or None,
        )


@dataclass(frozen=True)
class ForkchoiceUpdatedResponse:
    """Response from forkchoiceUpdated."""

    payload_status: PayloadStatus
    payload_id: Optional[PayloadId] = None

    def to_dict(self) -> dict:
        return {
            "payloadStatus": self.payload_status.to_dict(),
            "payloadId": self.payload_id.to_hex() if self.payload_id is not None else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ForkchoiceUpdatedResponse":
        status = data["payloadStatus"] if "payloadStatus" in data else data["status"]
        return cls(
            payload_status=PayloadStatus.from_dict(status),
            payload_id=PayloadId.from_hex(data["payloadId"]) if data.get("payloadId") else None,
        )


def _transaction_id(tx: Any) -> bytes:
    # Full transaction objects are reduced to their hash.
    if isinstance(tx, dict):
        tx = tx["hash"]
    return decode_data(tx, HASH_LENGTH)


@dataclass(frozen=True)
class ExecutionBlock:
    """Block as returned by eth_getBlockByHash / eth_getBlockByNumber."""

    number: int
    hash: bytes
    parent_hash: bytes
    sha3_uncles: bytes
    miner: bytes
    state_root: bytes
    transactions_root: bytes
    receipts_root: bytes
    logs_bloom: bytes
    difficulty: int
    gas_limit: int
    gas_used: int
    timestamp: int
    size: int
    extra_data: bytes
    total_difficulty: Optional[int] = None
    base_fee_per_gas: Optional[int] = None
    transactions: tuple[bytes, ...] = field(default_factory=tuple)
    uncles: tuple[bytes, ...] = field(default_factory=tuple)

    def __post_init__(self):
        check_length("hash", self.hash, HASH_LENGTH)
        check_length("parent_hash", self.parent_hash, HASH_LENGTH)
        check_length("sha3_uncles", self.sha3_uncles, HASH_LENGTH)
        check_length("miner", self.miner, ADDRESS_LENGTH)
        check_length("state_root", self.state_root, HASH_LENGTH)
        check_length("transactions_root", self.transactions_root, HASH_LENGTH)
        check_length("receipts_root", self.receipts_root, HASH_LENGTH)
        check_length("logs_bloom", self.logs_bloom, LOGS_BLOOM_LENGTH)
        object.__setattr__(self, "transactions", tuple(bytes(tx) for tx in self.transactions))
        object.__setattr__(self, "uncles", tuple(bytes(u) for u in self.uncles))

    def to_dict(self) -> dict:
        result = {
            "number": encode_quantity(self.number),
            "hash": encode_data(self.hash),
            "parentHash": encode_data(self.parent_hash),
            "sha3Uncles": encode_data(self.sha3_uncles),
            "miner": encode_data(self.miner),
            "stateRoot": encode_data(self.state_root),
            "transactionsRoot": encode_data(self.transactions_root),
            "receiptsRoot": encode_data(self.receipts_root),
            "logsBloom": encode_data(self.logs_bloom),
            "difficulty": encode_quantity(self.difficulty),
            "gasLimit": encode_quantity(self.gas_limit),
            "gasUsed": encode_quantity(self.gas_used),
            "timestamp": encode_quantity(self.timestamp),
            "size": encode_quantity(self.size),
            "extraData": encode_data(self.extra_data),
            "transactions": [encode_data(tx) for tx in self.transactions],
            "uncles": [encode_data(u) for u in self.uncles],
        }
        if self.total_difficulty is not None:
            result["totalDifficulty"] = encode_quantity(self.total_difficulty)
        if self.base_fee_per_gas is not None:
            result["baseFeePerGas"] = encode_quantity(self.base_fee_per_gas)
        return result

    @classmethod
    def from_dict(cls, data: dict) -> "ExecutionBlock":
        return cls(
            number=decode_quantity(data["number"]),
            hash=decode_data(data["hash"], HASH_LENGTH),
            parent_hash=decode_data(data["parentHash"], HASH_LENGTH),
            sha3_uncles=decode_data(data["sha3Uncles"], HASH_LENGTH),
            miner=decode_data(data["miner"], ADDRESS_LENGTH),
            state_root=decode_data(data["stateRoot"], HASH_LENGTH),
            transactions_root=decode_data(data["transactionsRoot"], HASH_LENGTH),
            receipts_root=decode_data(data["receiptsRoot"], HASH_LENGTH),
            logs_bloom=decode_data(data["logsBloom"], LOGS_BLOOM_LENGTH),
            difficulty=decode_quantity(data["difficulty"]),
            total_difficulty=(
                decode_quantity(data["totalDifficulty"])
                if data.get("totalDifficulty") is not None
                else None
            ),
            gas_limit=decode_quantity(data["gasLimit"]),
            gas_used=decode_quantity(data["gasUsed"]),
            timestamp=decode_quantity(data["timestamp"]),
            size=decode_quantity(data["size"]),
            extra_data=decode_data(data["extraData"]),
            base_fee_per_gas=(
                decode_quantity(data["baseFeePerGas"])
                if data.get("baseFeePerGas") is not None
                else None
            ),
            transactions=tuple(_transaction_id(tx) for tx in data.get("transactions", [])),
            uncles=tuple(decode_data(u, HASH_LENGTH) for u in data.get("uncles", [])),
        )
