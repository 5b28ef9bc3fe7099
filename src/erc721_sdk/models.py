from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

__all__ = [
    "ListenerStatus",
    "LogEntry",
    "TransferEvent",
    "ApprovalEvent",
    "ApprovalForAllEvent",
]


class ListenerStatus(str, Enum):
    """Lifecycle status of the background event listener."""

    STOPPED = "stopped"
    RUNNING = "running"
    FAILED = "failed"


@dataclass(frozen=True)
class LogEntry:
    """A raw contract log as returned by ``eth_getLogs``.

    Attributes:
        address: Contract that emitted the log (checksummed)
        topics: Indexed topics, 32 bytes each; ``topics[0]`` is the event topic
        data: Non-indexed ABI-encoded payload
        block_number: Block the log was mined in
        transaction_hash: Hex hash of the emitting transaction
        log_index: Position of the log within the block
    """
    address: str
    topics: List[bytes]
    data: bytes = b""
    block_number: Optional[int] = None
    transaction_hash: Optional[str] = None
    log_index: Optional[int] = None

    @property
    def event_topic(self) -> Optional[bytes]:
        return self.topics[0] if self.topics else None


@dataclass(frozen=True)
class TransferEvent:
    """Ownership of ``token_id`` changed from ``from_address`` to ``to_address``.

    A zero ``from_address`` is a mint, a zero ``to_address`` is a burn.
    """
    from_address: str
    to_address: str
    token_id: int
    log: Optional[LogEntry] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class ApprovalEvent:
    """The approved address for ``token_id`` was changed or reaffirmed.

    A zero ``approved`` address means there is no approved address.
    """
    owner: str
    approved: str
    token_id: int
    log: Optional[LogEntry] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class ApprovalForAllEvent:
    """``operator`` was enabled or disabled to manage all of ``owner``'s tokens."""
    owner: str
    operator: str
    approved: bool
    log: Optional[LogEntry] = field(default=None, compare=False, repr=False)
