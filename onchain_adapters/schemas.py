"""
Pydantic Schemas for JSON-RPC node responses.

Node responses are validated here before being turned into the
immutable models the sync engine works with.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from onchain_adapters.models import (
    BlockHeader,
    CallFrame,
    RawLog,
    Transaction,
    TransactionReceipt,
)


def parse_quantity(value: Any) -> Any:
    """Convert a hex quantity ("0x1a") to int, leave ints untouched."""
    if isinstance(value, str):
        return int(value, 16) if value.startswith("0x") else int(value)
    return value


def _lower(value: Any) -> Any:
    return value.lower() if isinstance(value, str) else value


# =============================================================
# LOGS
# =============================================================

class RpcLog(BaseModel):
    """Entry of an `eth_getLogs` / receipt `logs` array."""
    model_config = ConfigDict(populate_by_name=True)

    address: str
    topics: List[str]
    data: str = "0x"
    block_number: int = Field(alias="blockNumber")
    block_hash: str = Field(alias="blockHash")
    transaction_hash: str = Field(alias="transactionHash")
    transaction_index: int = Field(alias="transactionIndex")
    log_index: int = Field(alias="logIndex")
    removed: bool = False

    @field_validator("block_number", "transaction_index", "log_index", mode="before")
    @classmethod
    def _quantity(cls, value: Any) -> Any:
        return parse_quantity(value)

    @field_validator("address", "block_hash", "transaction_hash", mode="before")
    @classmethod
    def _lowercase(cls, value: Any) -> Any:
        return _lower(value)

    @field_validator("topics", mode="before")
    @classmethod
    def _lowercase_topics(cls, value: Any) -> Any:
        return [_lower(topic) for topic in value] if isinstance(value, list) else value

    def to_model(self) -> RawLog:
        return RawLog(
            address=self.address,
            topics=tuple(self.topics),
            data=self.data,
            block_number=self.block_number,
            block_hash=self.block_hash,
            transaction_hash=self.transaction_hash,
            transaction_index=self.transaction_index,
            log_index=self.log_index,
            removed=self.removed,
        )


# =============================================================
# BLOCKS & TRANSACTIONS
# =============================================================

class RpcBlock(BaseModel):
    """Header fields of an `eth_getBlockByNumber` response."""
    model_config = ConfigDict(populate_by_name=True)

    number: int
    hash: str
    timestamp: int

    @field_validator("number", "timestamp", mode="before")
    @classmethod
    def _quantity(cls, value: Any) -> Any:
        return parse_quantity(value)

    @field_validator("hash", mode="before")
    @classmethod
    def _lowercase(cls, value: Any) -> Any:
        return _lower(value)

    def to_model(self) -> BlockHeader:
        return BlockHeader(number=self.number, hash=self.hash, timestamp=self.timestamp)


class RpcTransaction(BaseModel):
    """An `eth_getTransactionByHash` response."""
    model_config = ConfigDict(populate_by_name=True)

    hash: str
    from_address: str = Field(alias="from")
    to: Optional[str] = None
    input: str = "0x"
    value: int = 0
    block_number: Optional[int] = Field(default=None, alias="blockNumber")

    @field_validator("value", "block_number", mode="before")
    @classmethod
    def _quantity(cls, value: Any) -> Any:
        return parse_quantity(value)

    @field_validator("hash", "from_address", "to", "input", mode="before")
    @classmethod
    def _lowercase(cls, value: Any) -> Any:
        return _lower(value)

    def to_model(self) -> Transaction:
        return Transaction(
            hash=self.hash,
            from_address=self.from_address,
            to=self.to,
            input=self.input,
            value=self.value,
            block_number=self.block_number,
        )


class RpcReceipt(BaseModel):
    """An `eth_getTransactionReceipt` response."""
    model_config = ConfigDict(populate_by_name=True)

    transaction_hash: str = Field(alias="transactionHash")
    status: int = 1
    block_number: int = Field(alias="blockNumber")
    logs: List[RpcLog] = Field(default_factory=list)

    @field_validator("status", "block_number", mode="before")
    @classmethod
    def _quantity(cls, value: Any) -> Any:
        return parse_quantity(value)

    def to_model(self) -> TransactionReceipt:
        return TransactionReceipt(
            transaction_hash=self.transaction_hash.lower(),
            status=self.status,
            block_number=self.block_number,
            logs=tuple(log.to_model() for log in self.logs),
        )


class RpcCallFrame(BaseModel):
    """A `debug_traceTransaction` frame produced by the `callTracer`."""
    model_config = ConfigDict(populate_by_name=True)

    type: str = "CALL"
    from_address: str = Field(alias="from")
    to: Optional[str] = None
    input: str = "0x"
    value: int = 0
    calls: List["RpcCallFrame"] = Field(default_factory=list)

    @field_validator("value", mode="before")
    @classmethod
    def _quantity(cls, value: Any) -> Any:
        return parse_quantity(value) if value is not None else 0

    @field_validator("from_address", "to", "input", mode="before")
    @classmethod
    def _lowercase(cls, value: Any) -> Any:
        return _lower(value)

    def to_model(self) -> CallFrame:
        return CallFrame(
            call_type=self.type,
            from_address=self.from_address,
            to=self.to,
            input=self.input,
            value=self.value,
            calls=tuple(call.to_model() for call in self.calls),
        )


RpcCallFrame.model_rebuild()
