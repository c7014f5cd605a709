"""
Events Sync - ABI Helpers.

============================================================
RESPONSIBILITY
============================================================
Minimal event and function ABI descriptions backed by eth_abi.

- Topics and selectors are derived from canonical signatures
- Indexed parameters are decoded from topics
- Non-indexed parameters are decoded from log data
- Decoded bytes are returned as 0x-prefixed hex strings

============================================================
"""

from dataclasses import dataclass
from typing import Any, Sequence

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError, InsufficientDataBytes
from eth_utils import decode_hex, encode_hex, function_signature_to_4byte_selector, keccak

from core.exceptions import EventDecodeError
from onchain_adapters.models import RawLog


# Errors eth_abi raises for malformed payloads
ABI_DECODE_ERRORS = (DecodingError, InsufficientDataBytes, ValueError, TypeError)


def normalize(value: Any) -> Any:
    """Convert decoded eth_abi values into plain, JSON-friendly Python values."""
    if isinstance(value, (bytes, bytearray)):
        return encode_hex(value)
    if isinstance(value, (tuple, list)):
        return tuple(normalize(item) for item in value)
    return value


def decode_values(types: Sequence[str], data: Any) -> tuple:
    """Decode an ABI-encoded payload (hex string or bytes)."""
    raw = decode_hex(data) if isinstance(data, str) else bytes(data)
    return normalize(decode(list(types), raw))


@dataclass(frozen=True)
class EventParam:
    """One parameter of an event signature."""
    name: str
    type: str
    indexed: bool = False


class EventAbi:
    """An event signature that can decode raw logs."""

    def __init__(self, name: str, params: Sequence[EventParam]) -> None:
        self.name = name
        self.params = tuple(params)
        self.signature = f"{name}({','.join(p.type for p in self.params)})"
        self.topic = encode_hex(keccak(text=self.signature))

    @property
    def indexed_params(self) -> tuple[EventParam, ...]:
        return tuple(p for p in self.params if p.indexed)

    @property
    def data_params(self) -> tuple[EventParam, ...]:
        return tuple(p for p in self.params if not p.indexed)

    @property
    def num_topics(self) -> int:
        """Topic count of a non-anonymous log of this event."""
        return 1 + len(self.indexed_params)

    def decode(self, log: RawLog) -> dict[str, Any]:
        """
        Decode a raw log into a name -> value mapping.

        Raises:
            EventDecodeError: Topics or data do not match the signature
        """
        indexed = self.indexed_params
        if len(log.topics) != 1 + len(indexed):
            raise EventDecodeError(
                f"{self.name}: expected {1 + len(indexed)} topics, got {len(log.topics)}",
                tx_hash=log.transaction_hash,
                log_index=log.log_index,
            )

        try:
            args: dict[str, Any] = {}
            for param, topic in zip(indexed, log.topics[1:]):
                args[param.name] = decode_values([param.type], topic)[0]

            values = decode_values([p.type for p in self.data_params], log.data)
            for param, value in zip(self.data_params, values):
                args[param.name] = value
            return args

        except ABI_DECODE_ERRORS as e:
            raise EventDecodeError(
                f"{self.name}: cannot decode log",
                tx_hash=log.transaction_hash,
                log_index=log.log_index,
                cause=e,
            ) from e

    def encode_log_fields(self, args: dict[str, Any]) -> tuple[tuple[str, ...], str]:
        """Encode arguments into (topics, data), the inverse of `decode()`."""
        topics = [self.topic]
        for param in self.indexed_params:
            topics.append(encode_hex(encode([param.type], [args[param.name]])))
        data = encode([p.type for p in self.data_params], [args[p.name] for p in self.data_params])
        return tuple(topics), encode_hex(data)

    def __repr__(self) -> str:
        return f"<EventAbi({self.signature})>"


class FunctionAbi:
    """A function signature that can encode and decode calldata."""

    def __init__(self, name: str, input_types: Sequence[str], output_types: Sequence[str] = ()) -> None:
        self.name = name
        self.input_types = tuple(input_types)
        self.output_types = tuple(output_types)
        self.signature = f"{name}({','.join(self.input_types)})"
        self.selector = encode_hex(function_signature_to_4byte_selector(self.signature))

    def matches(self, calldata: str) -> bool:
        return calldata[:10].lower() == self.selector

    def decode_input(self, calldata: str) -> tuple:
        """Decode calldata arguments (selector included)."""
        if not self.matches(calldata):
            raise EventDecodeError(f"{self.name}: selector mismatch")
        try:
            return decode_values(self.input_types, "0x" + calldata[10:])
        except ABI_DECODE_ERRORS as e:
            raise EventDecodeError(f"{self.name}: cannot decode calldata", cause=e) from e

    def encode_input(self, args: Sequence[Any]) -> str:
        return self.selector + encode(list(self.input_types), list(args)).hex()

    def decode_output(self, output: str) -> tuple:
        try:
            return decode_values(self.output_types, output)
        except ABI_DECODE_ERRORS as e:
            raise EventDecodeError(f"{self.name}: cannot decode return data", cause=e) from e

    def __repr__(self) -> str:
        return f"<FunctionAbi({self.signature})>"
