from .abi import decode_event, encode_call, event_topic, function_selector
from .client import ApprovalForAllHandler, ApprovalHandler, ERC721Client, TransferHandler
from .config import NETWORKS, Network, NetworkConfig, get_network_config
from .constants import (
    APPROVAL_EVENT,
    APPROVAL_FOR_ALL_EVENT,
    DEFAULT_POLL_INTERVAL,
    IERC721_ENUMERABLE_INTERFACE_ID,
    IERC721_INTERFACE_ID,
    IERC721_METADATA_INTERFACE_ID,
    TRANSFER_EVENT,
    ZERO_ADDRESS,
)
from .errors import (
    DecodeError,
    ERC721Error,
    InvalidAddressError,
    InvalidPrivateKeyError,
    InvalidTokenIdError,
    ListenerError,
    RpcError,
    TransactionError,
    ValidationError,
)
from .models import (
    ApprovalEvent,
    ApprovalForAllEvent,
    ListenerStatus,
    LogEntry,
    TransferEvent,
)
from .transport import Web3Transport, address_from_private_key
from .watcher import LogWatcher

__version__ = "0.1.0"

__all__ = [
    # Client
    "ERC721Client",
    "TransferHandler",
    "ApprovalHandler",
    "ApprovalForAllHandler",
    # Transport
    "Web3Transport",
    "address_from_private_key",
    "LogWatcher",
    # Config
    "Network",
    "NetworkConfig",
    "NETWORKS",
    "get_network_config",
    # Models
    "ListenerStatus",
    "LogEntry",
    "TransferEvent",
    "ApprovalEvent",
    "ApprovalForAllEvent",
    # Errors
    "ERC721Error",
    "ValidationError",
    "InvalidAddressError",
    "InvalidTokenIdError",
    "InvalidPrivateKeyError",
    "RpcError",
    "TransactionError",
    "DecodeError",
    "ListenerError",
    # ABI
    "encode_call",
    "function_selector",
    "event_topic",
    "decode_event",
    # Constants
    "ZERO_ADDRESS",
    "TRANSFER_EVENT",
    "APPROVAL_EVENT",
    "APPROVAL_FOR_ALL_EVENT",
    "IERC721_INTERFACE_ID",
    "IERC721_METADATA_INTERFACE_ID",
    "IERC721_ENUMERABLE_INTERFACE_ID",
    "DEFAULT_POLL_INTERVAL",
]
