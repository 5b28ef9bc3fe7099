"""
Shared fixtures for ERC-721 SDK tests.
"""

import threading
from typing import Any, Dict, List, Optional

import pytest
from eth_abi import encode
from eth_account import Account
from web3 import Web3

from erc721_sdk import ERC721Client, LogEntry, event_topic
from erc721_sdk.constants import APPROVAL_EVENT, APPROVAL_FOR_ALL_EVENT, TRANSFER_EVENT


# =============================================================================
# Test Constants
# =============================================================================

# Private key for tests (DO NOT USE IN PRODUCTION)
TEST_PRIVATE_KEY = "0x" + "11" * 32
TEST_SENDER = Account.from_key(TEST_PRIVATE_KEY).address

CONTRACT = Web3.to_checksum_address("0x" + "c0" * 20)
OWNER = Web3.to_checksum_address("0x" + "a1" * 20)
RECIPIENT = Web3.to_checksum_address("0x" + "b2" * 20)
OPERATOR = Web3.to_checksum_address("0x" + "d3" * 20)


def address_topic(address: str) -> bytes:
    return b"\x00" * 12 + bytes.fromhex(address[2:])


def uint_word(value: int) -> bytes:
    return value.to_bytes(32, "big")


def transfer_log(from_address: str, to_address: str, token_id: int, block: int = 100) -> LogEntry:
    return LogEntry(
        address=CONTRACT,
        topics=[
            event_topic(TRANSFER_EVENT),
            address_topic(from_address),
            address_topic(to_address),
            uint_word(token_id),
        ],
        block_number=block,
        transaction_hash="0x" + "ee" * 32,
    )


def approval_log(owner: str, approved: str, token_id: int) -> LogEntry:
    return LogEntry(
        address=CONTRACT,
        topics=[
            event_topic(APPROVAL_EVENT),
            address_topic(owner),
            address_topic(approved),
            uint_word(token_id),
        ],
    )


def approval_for_all_log(owner: str, operator: str, approved: bool) -> LogEntry:
    return LogEntry(
        address=CONTRACT,
        topics=[
            event_topic(APPROVAL_FOR_ALL_EVENT),
            address_topic(owner),
            address_topic(operator),
        ],
        data=uint_word(1 if approved else 0),
    )


def unknown_log() -> LogEntry:
    return LogEntry(
        address=CONTRACT,
        topics=[event_topic("Minted(address,uint256)"), address_topic(OWNER)],
        data=uint_word(5),
    )


# =============================================================================
# Stub Transport
# =============================================================================


class StubTransport:
    """In-memory stand-in for Web3Transport that records every request."""

    def __init__(self, head: int = 100):
        self.head = head
        self.responses: Dict[str, bytes] = {}
        self.call_error: Optional[Exception] = None
        self.logs_error: Optional[Exception] = None
        self.calls: List[tuple] = []
        self.writes: List[tuple] = []
        self.log_requests: List[tuple] = []
        self._pending: List[List[LogEntry]] = []
        self._lock = threading.Lock()

    def call(self, contract: str, signature: str, args: List[Any]) -> bytes:
        self.calls.append((contract, signature, list(args)))
        if self.call_error is not None:
            raise self.call_error
        return self.responses[signature]

    def write(self, private_key, contract: str, signature: str, args: List[Any]):
        self.writes.append((private_key, contract, signature, list(args)))
        return {"status": 1, "transactionHash": b"\x01" * 32, "logs": []}

    def block_number(self) -> int:
        return self.head

    def get_logs(self, contract: str, from_block: int, to_block: int) -> List[LogEntry]:
        with self._lock:
            self.log_requests.append((contract, from_block, to_block))
            if self.logs_error is not None:
                raise self.logs_error
            return self._pending.pop(0) if self._pending else []

    def push_logs(self, *logs: LogEntry) -> None:
        """Queue one batch, returned by the next get_logs call."""
        with self._lock:
            self._pending.append(list(logs))


@pytest.fixture()
def transport() -> StubTransport:
    return StubTransport()


@pytest.fixture()
def client(transport):
    c = ERC721Client(transport, CONTRACT, poll_interval=0.01)
    yield c
    c.close()


def abi_encode(types: List[str], values: List[Any]) -> bytes:
    return encode(types, values)
