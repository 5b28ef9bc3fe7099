"""
ABI helpers for ERC-721 calls and logs.

Canonical signature strings such as ``"ownerOf(uint256)"`` are the single
source of truth: selectors and event topics are derived from them with
Keccak-256, argument types are parsed from them, and eth-abi does the
encoding. Only the flat types used by ERC-721 are supported (no tuples).
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError, EncodingError
from eth_utils import keccak, to_checksum_address

from .constants import (
    ABI_SELECTOR_LENGTH,
    ABI_WORD_LENGTH,
    ADDRESS_LENGTH,
    APPROVAL_EVENT,
    EMPTY_ADDRESS,
    APPROVAL_FOR_ALL_EVENT,
    REVERT_SELECTOR,
    TRANSFER_EVENT,
)
from .errors import DecodeError, ValidationError
from .models import ApprovalEvent, ApprovalForAllEvent, LogEntry, TransferEvent

__all__ = [
    "parse_signature",
    "function_selector",
    "event_topic",
    "encode_call",
    "decode_result",
    "decode_revert_reason",
    "decode_event",
    "event_signature_of",
    "EVENT_TOPICS",
]

ERC721Event = Union[TransferEvent, ApprovalEvent, ApprovalForAllEvent]


@lru_cache(maxsize=None)
def parse_signature(signature: str) -> Tuple[str, Tuple[str, ...]]:
    """Split ``"name(type1,type2)"`` into its name and argument types.

    Args:
        signature: Canonical method or event signature (no spaces, no names)

    Returns:
        ``(name, types)`` tuple

    Raises:
        ValidationError: If the signature is not in canonical form
    """
    open_idx = signature.find("(")
    if open_idx <= 0 or not signature.endswith(")") or " " in signature:
        raise ValidationError(f"Not a canonical signature: {signature!r}")
    name = signature[:open_idx]
    inner = signature[open_idx + 1 : -1]
    types = tuple(inner.split(",")) if inner else ()
    if any(not t or "(" in t or ")" in t for t in types):
        raise ValidationError(f"Not a canonical signature: {signature!r}")
    return name, types


@lru_cache(maxsize=None)
def function_selector(signature: str) -> bytes:
    """First 4 bytes of the Keccak-256 hash of the method signature."""
    parse_signature(signature)
    return keccak(text=signature)[:ABI_SELECTOR_LENGTH]


@lru_cache(maxsize=None)
def event_topic(signature: str) -> bytes:
    """Keccak-256 hash of the event signature (``topics[0]`` of its logs)."""
    parse_signature(signature)
    return keccak(text=signature)


def encode_call(signature: str, args: Sequence[Any]) -> bytes:
    """Build calldata: selector followed by the ABI-encoded arguments.

    Raises:
        ValidationError: If the argument count or a value does not fit the types
    """
    _, types = parse_signature(signature)
    if len(args) != len(types):
        raise ValidationError(
            f"{signature} expects {len(types)} arguments, got {len(args)}",
            details={"signature": signature},
        )
    try:
        return function_selector(signature) + encode(list(types), list(args))
    except (EncodingError, TypeError, ValueError) as e:
        raise ValidationError(
            f"Cannot encode arguments for {signature}: {e}",
            details={"signature": signature},
        ) from e


# ------------------------------------------------------------------
# Return values
# ------------------------------------------------------------------

def _decode_bool_word(word: bytes) -> bool:
    # Any non-zero word is true; strict decoders reject values other than 0/1.
    if len(word) < ABI_WORD_LENGTH:
        raise DecodingError(f"expected {ABI_WORD_LENGTH} bytes, got {len(word)}")
    return int.from_bytes(word[:ABI_WORD_LENGTH], "big") != 0


def _decode_address_word(word: bytes) -> str:
    (value,) = decode(["address"], word)
    return to_checksum_address(value)


_DECODERS: Dict[str, Callable[[bytes], Any]] = {
    "address": _decode_address_word,
    "bool": _decode_bool_word,
    "uint256": lambda raw: decode(["uint256"], raw)[0],
    "string": lambda raw: decode(["string"], raw)[0],
}

_PLACEHOLDERS: Dict[str, Any] = {
    "address": EMPTY_ADDRESS,
    "string": "",
}


def decode_result(signature: str, output_type: str, raw: Union[bytes, str]) -> Any:
    """Decode the raw return of a read call into a Python value.

    Args:
        signature: Method signature that produced ``raw`` (for error messages)
        output_type: One of ``address``, ``bool``, ``uint256``, ``string``
        raw: Returned bytes (or ``0x`` hex string)

    Returns:
        Checksummed address, bool, int or str

    Raises:
        DecodeError: If ``raw`` is not a valid encoding. Address and string
            results carry ``""`` as the error's ``result``.
    """
    decoder = _DECODERS[output_type]
    placeholder = _PLACEHOLDERS.get(output_type)
    try:
        if isinstance(raw, str):
            raw = bytes.fromhex(raw[2:] if raw.startswith("0x") else raw)
        if not raw:
            raise DecodingError("empty result (no contract code or call reverted)")
        return decoder(bytes(raw))
    except (DecodingError, UnicodeDecodeError, ValueError, OverflowError) as e:
        raise DecodeError(signature, str(e), result=placeholder) from e


def decode_revert_reason(raw: str) -> Optional[str]:
    """Decode Solidity revert reason from error data.

    Args:
        raw: Hex-encoded error data string

    Returns:
        Decoded revert reason string, or None if decoding fails
    """
    # Standard Solidity revertWithReason selector 0x08c379a0 + encoded string
    if raw.startswith(REVERT_SELECTOR) and len(raw) >= 10:
        try:
            data = bytes.fromhex(raw[2:])
            if len(data) >= ABI_SELECTOR_LENGTH + ABI_WORD_LENGTH + ABI_WORD_LENGTH:
                offset = ABI_SELECTOR_LENGTH + ABI_WORD_LENGTH
                strlen = int.from_bytes(data[offset : offset + ABI_WORD_LENGTH], "big")
                reason_start = offset + ABI_WORD_LENGTH
                reason_bytes = data[reason_start : reason_start + strlen]
                return reason_bytes.decode(errors="ignore")
        except ValueError:
            return None
    return None


# ------------------------------------------------------------------
# Logs
# ------------------------------------------------------------------

def _decode_word(abi_type: str, word: bytes) -> Any:
    if len(word) != ABI_WORD_LENGTH:
        raise DecodingError(f"expected {ABI_WORD_LENGTH}-byte word, got {len(word)}")
    if abi_type == "address":
        return to_checksum_address(word[-ADDRESS_LENGTH:])
    if abi_type == "bool":
        return _decode_bool_word(word)
    return int.from_bytes(word, "big")


def _decode_log_args(signature: str, log: LogEntry) -> List[Any]:
    """Decode event arguments in ABI order.

    The first ``len(topics) - 1`` arguments come from the indexed topics and
    the rest from ``data``. This covers the standard layout as well as
    contracts that index fewer parameters (e.g. pre-standard Transfer events
    with everything in ``data``).
    """
    _, types = parse_signature(signature)
    indexed = log.topics[1:]
    if len(indexed) > len(types):
        raise DecodingError(f"{len(indexed)} indexed topics for {len(types)} parameters")

    values = [_decode_word(t, topic) for t, topic in zip(types, indexed)]
    remaining = types[len(indexed):]
    data = log.data or b""
    if len(data) < ABI_WORD_LENGTH * len(remaining):
        raise DecodingError(
            f"data holds {len(data)} bytes, {ABI_WORD_LENGTH * len(remaining)} needed"
        )
    for i, abi_type in enumerate(remaining):
        word = data[i * ABI_WORD_LENGTH : (i + 1) * ABI_WORD_LENGTH]
        values.append(_decode_word(abi_type, word))
    return values


EVENT_TOPICS: Dict[bytes, str] = {
    event_topic(TRANSFER_EVENT): TRANSFER_EVENT,
    event_topic(APPROVAL_EVENT): APPROVAL_EVENT,
    event_topic(APPROVAL_FOR_ALL_EVENT): APPROVAL_FOR_ALL_EVENT,
}

_EVENT_TYPES = {
    TRANSFER_EVENT: TransferEvent,
    APPROVAL_EVENT: ApprovalEvent,
    APPROVAL_FOR_ALL_EVENT: ApprovalForAllEvent,
}


def event_signature_of(log: LogEntry) -> Optional[str]:
    """Return the ERC-721 event signature a log was emitted for, if any."""
    topic = log.event_topic
    if topic is None:
        return None
    return EVENT_TOPICS.get(bytes(topic))


def decode_event(log: LogEntry) -> Optional[ERC721Event]:
    """Decode an ERC-721 event log.

    Returns:
        TransferEvent, ApprovalEvent or ApprovalForAllEvent; None when the
        log's topic is not one of the three ERC-721 events

    Raises:
        DecodeError: If the topic matches but the payload is malformed
    """
    signature = event_signature_of(log)
    if signature is None:
        return None
    try:
        args = _decode_log_args(signature, log)
    except (DecodingError, ValueError) as e:
        raise DecodeError(signature, str(e), subject="event log") from e
    return _EVENT_TYPES[signature](*args, log=log)
