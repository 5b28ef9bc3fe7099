"""ERC-721 Contract Client for Python.

This module provides the ERC721Client class, a typed binding to one deployed
ERC-721 contract. Every method maps onto a single standardized contract call
or event:

- Ownership and approval queries (IERC721)
- Collection metadata (IERC721Metadata)
- Enumeration (IERC721Enumerable)
- Transfers and approvals signed with a private key
- Transfer / Approval / ApprovalForAll event handlers

Contract preconditions (ownership, approvals, token existence, zero-address
receivers) are not pre-checked; the contract reverts and the error is
reported back as RpcError or TransactionError.

Example:
    >>> from erc721_sdk import ERC721Client, Network
    >>> client = ERC721Client.from_network(Network.SEPOLIA, "0x...")
    >>> owner = client.owner_of(42)
    >>> receipt = client.transfer_from("0x<private key>", "0x<recipient>", 42)
"""
import threading
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from .abi import decode_event, decode_result, event_signature_of
from .config import Network, get_network_config
from .constants import (
    APPROVAL_EVENT,
    APPROVAL_FOR_ALL_EVENT,
    APPROVE,
    BALANCE_OF,
    DEFAULT_POLL_INTERVAL,
    GET_APPROVED,
    IS_APPROVED_FOR_ALL,
    NAME,
    OWNER_OF,
    PROVIDER_TIMEOUT_SECONDS,
    SAFE_TRANSFER_FROM,
    SAFE_TRANSFER_FROM_WITH_DATA,
    SET_APPROVAL_FOR_ALL,
    SUPPORTS_INTERFACE,
    SYMBOL,
    TOKEN_BY_INDEX,
    TOKEN_OF_OWNER_BY_INDEX,
    TOKEN_URI,
    TOTAL_SUPPLY,
    TRANSFER_EVENT,
    TRANSFER_FROM,
)
from .errors import DecodeError, ValidationError
from .models import (
    ApprovalEvent,
    ApprovalForAllEvent,
    ListenerStatus,
    LogEntry,
    TransferEvent,
)
from .transport import PrivateKey, Web3Transport, address_from_private_key, to_log_entry
from .utils.logging import get_logger
from .utils.validation import (
    validate_address,
    validate_bool,
    validate_interface_id,
    validate_uint256,
)
from .watcher import LogWatcher

__all__ = [
    "ERC721Client",
    "TransferHandler",
    "ApprovalHandler",
    "ApprovalForAllHandler",
]

_logger = get_logger(__name__)

TransferHandler = Callable[[TransferEvent], None]
ApprovalHandler = Callable[[ApprovalEvent], None]
ApprovalForAllHandler = Callable[[ApprovalForAllEvent], None]


class ERC721Client:
    """Binding to one ERC-721 contract over a Web3 transport.

    Args:
        transport: Provides ``call``, ``write``, ``get_logs`` and ``block_number``
        contract: Address of the deployed ERC-721 contract
        poll_interval: Seconds between log polls while a handler is set
        on_listener_error: Called with the fatal error if the listener dies
    """

    def __init__(
        self,
        transport: Web3Transport,
        contract: str,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        on_listener_error: Optional[Callable[[BaseException], None]] = None,
    ):
        self.transport = transport
        self.contract = validate_address(contract, "contract")
        self.poll_interval = poll_interval
        self._on_listener_error = on_listener_error
        self._lock = threading.RLock()
        self._watcher: Optional[LogWatcher] = None
        self._on_transfer: Optional[TransferHandler] = None
        self._on_approval: Optional[ApprovalHandler] = None
        self._on_approval_for_all: Optional[ApprovalForAllHandler] = None

    @classmethod
    def from_network(
        cls,
        network: Network,
        contract: str,
        rpc_url: Optional[str] = None,
        timeout: int = PROVIDER_TIMEOUT_SECONDS,
        tx_overrides: Optional[dict] = None,
        manual_nonce: bool = False,
        **kwargs: Any,
    ) -> "ERC721Client":
        """Create a client over HTTP for a known network.

        Args:
            network: Network preset (chain id and default RPC URL)
            contract: ERC-721 contract address
            rpc_url: Overrides the preset RPC URL
            timeout: HTTP request timeout in seconds
            tx_overrides: Extra fields merged into every transaction
            manual_nonce: Track nonces locally
            **kwargs: Passed to ``ERC721Client.__init__``
        """
        cfg = get_network_config(network, rpc_url)
        transport = Web3Transport.from_url(
            cfg.rpc_url,
            timeout=timeout,
            chain_id=cfg.chain_id,
            tx_overrides=tx_overrides,
            manual_nonce=manual_nonce,
        )
        return cls(transport, contract, **kwargs)

    # ------------------------------------------------------------------
    # IERC721 reads
    # ------------------------------------------------------------------
    def balance_of(self, owner: str) -> int:
        """Count the tokens assigned to ``owner`` (possibly zero)."""
        owner = validate_address(owner, "owner")
        return self._call(BALANCE_OF, [owner], "uint256")

    def owner_of(self, token_id: int) -> str:
        """Find the owner of a token.

        Args:
            token_id: Token identifier

        Returns:
            Checksummed owner address

        Raises:
            RpcError: Transport failure or revert (e.g. nonexistent token)
            DecodeError: Malformed return; ``error.result`` is ``""``
        """
        token_id = validate_uint256(token_id, "token_id")
        return self._call(OWNER_OF, [token_id], "address")

    def get_approved(self, token_id: int) -> str:
        """Get the approved address for a token (the zero address if none).

        Raises:
            DecodeError: Malformed return; ``error.result`` is ``""``
        """
        token_id = validate_uint256(token_id, "token_id")
        return self._call(GET_APPROVED, [token_id], "address")

    def is_approved_for_all(self, owner: str, operator: str) -> bool:
        """Check whether ``operator`` may manage all of ``owner``'s tokens."""
        owner = validate_address(owner, "owner")
        operator = validate_address(operator, "operator")
        return self._call(IS_APPROVED_FOR_ALL, [owner, operator], "bool")

    # ------------------------------------------------------------------
    # IERC721Metadata
    # ------------------------------------------------------------------
    def name(self) -> str:
        return self._call(NAME, [], "string")

    def symbol(self) -> str:
        return self._call(SYMBOL, [], "string")

    def token_uri(self, token_id: int) -> str:
        """URI of the token's metadata JSON (ERC-721 Metadata JSON Schema)."""
        token_id = validate_uint256(token_id, "token_id")
        return self._call(TOKEN_URI, [token_id], "string")

    # ------------------------------------------------------------------
    # IERC721Enumerable
    # ------------------------------------------------------------------
    def total_supply(self) -> int:
        return self._call(TOTAL_SUPPLY, [], "uint256")

    def token_by_index(self, index: int) -> int:
        """Token id of the ``index``-th token; ``index`` < ``total_supply()``."""
        index = validate_uint256(index, "index")
        return self._call(TOKEN_BY_INDEX, [index], "uint256")

    def token_of_owner_by_index(self, owner: str, index: int) -> int:
        """Token id of ``owner``'s ``index``-th token; ``index`` < ``balance_of(owner)``."""
        owner = validate_address(owner, "owner")
        index = validate_uint256(index, "index")
        return self._call(TOKEN_OF_OWNER_BY_INDEX, [owner, index], "uint256")

    # ------------------------------------------------------------------
    # ERC-165
    # ------------------------------------------------------------------
    def supports_interface(self, interface_id: Union[str, bytes]) -> bool:
        """Query ERC-165 support, e.g. ``IERC721_ENUMERABLE_INTERFACE_ID``.

        Contracts without ERC-165 usually revert here; that surfaces as RpcError.
        """
        interface_bytes = validate_interface_id(interface_id)
        return self._call(SUPPORTS_INTERFACE, [interface_bytes], "bool")

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def safe_transfer_from(
        self,
        private_key: PrivateKey,
        to: str,
        token_id: int,
        data: Optional[bytes] = None,
        from_address: Optional[str] = None,
    ):
        """Transfer a token, checking that a contract receiver accepts it.

        Args:
            private_key: Key of the current owner (or of an approved operator)
            to: New owner
            token_id: Token to transfer
            data: Optional payload for ``onERC721Received``; selects the
                ``safeTransferFrom(address,address,uint256,bytes)`` overload
            from_address: Current owner when the key belongs to an operator
                (defaults to the key's own address)

        Returns:
            Transaction receipt

        Raises:
            TransactionError: If the transaction reverted on-chain
            RpcError: If estimation (usually reporting the revert) or submission fails
        """
        sender = self._sender(private_key, from_address)
        to = validate_address(to, "to")
        token_id = validate_uint256(token_id, "token_id")
        if data is None:
            return self._write(private_key, SAFE_TRANSFER_FROM, [sender, to, token_id])
        if not isinstance(data, (bytes, bytearray)):
            raise ValidationError("data must be bytes")
        return self._write(
            private_key, SAFE_TRANSFER_FROM_WITH_DATA, [sender, to, token_id, bytes(data)]
        )

    def transfer_from(
        self,
        private_key: PrivateKey,
        to: str,
        token_id: int,
        from_address: Optional[str] = None,
    ):
        """Transfer a token without the receiver check.

        THE CALLER IS RESPONSIBLE TO CONFIRM THAT ``to`` IS CAPABLE OF
        RECEIVING NFTS OR ELSE THEY MAY BE PERMANENTLY LOST.

        Returns:
            Transaction receipt
        """
        sender = self._sender(private_key, from_address)
        to = validate_address(to, "to")
        token_id = validate_uint256(token_id, "token_id")
        return self._write(private_key, TRANSFER_FROM, [sender, to, token_id])

    def approve(self, private_key: PrivateKey, spender: str, token_id: int):
        """Change or reaffirm the approved address for a token.

        Returns:
            Transaction receipt
        """
        spender = validate_address(spender, "spender")
        token_id = validate_uint256(token_id, "token_id")
        return self._write(private_key, APPROVE, [spender, token_id])

    def set_approval_for_all(self, private_key: PrivateKey, operator: str, approved: bool):
        """Enable or revoke ``operator`` for all of the key owner's tokens.

        Returns:
            Transaction receipt
        """
        operator = validate_address(operator, "operator")
        approved = validate_bool(approved, "approved")
        return self._write(private_key, SET_APPROVAL_FOR_ALL, [operator, approved])

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------
    @property
    def transfer_handler(self) -> Optional[TransferHandler]:
        return self._on_transfer

    @property
    def approval_handler(self) -> Optional[ApprovalHandler]:
        return self._on_approval

    @property
    def approval_for_all_handler(self) -> Optional[ApprovalForAllHandler]:
        return self._on_approval_for_all

    @property
    def listener_status(self) -> ListenerStatus:
        watcher = self._watcher
        return watcher.status if watcher is not None else ListenerStatus.STOPPED

    @property
    def listener_error(self) -> Optional[BaseException]:
        """Fatal error of the most recent listener, if it failed."""
        watcher = self._watcher
        return watcher.error if watcher is not None else None

    def set_transfer_handler(self, handler: Optional[TransferHandler]) -> ListenerStatus:
        """Set (or clear with None) the Transfer handler.

        The listener starts when the first handler is set and stops when the
        last one is cleared. Handlers run on the listener thread.

        Returns:
            Listener status after the change
        """
        with self._lock:
            self._on_transfer = handler
            return self._watch_or_stop()

    def set_approval_handler(self, handler: Optional[ApprovalHandler]) -> ListenerStatus:
        """Set (or clear with None) the Approval handler."""
        with self._lock:
            self._on_approval = handler
            return self._watch_or_stop()

    def set_approval_for_all_handler(
        self, handler: Optional[ApprovalForAllHandler]
    ) -> ListenerStatus:
        """Set (or clear with None) the ApprovalForAll handler."""
        with self._lock:
            self._on_approval_for_all = handler
            return self._watch_or_stop()

    def parse_events(self, receipt) -> Dict[str, List[Any]]:
        """Decode the ERC-721 events this contract emitted in a receipt.

        Args:
            receipt: Transaction receipt (mapping with ``logs``)

        Returns:
            ``{"Transfer": [...], "Approval": [...], "ApprovalForAll": [...]}``;
            malformed logs are skipped with a warning, as in the listener
        """
        events: Dict[str, List[Any]] = {"Transfer": [], "Approval": [], "ApprovalForAll": []}
        for raw in receipt.get("logs", []):
            log = raw if isinstance(raw, LogEntry) else to_log_entry(raw)
            if log.address.lower() != self.contract.lower():
                continue
            try:
                event = decode_event(log)
            except DecodeError as e:
                self._warn_malformed(log, e)
                continue
            if event is not None:
                events[type(event).__name__.replace("Event", "")].append(event)
        return events

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def close(self) -> None:
        """Clear all handlers and cancel the listener if it is running.

        Does not wait for a handler that is currently executing.
        """
        with self._lock:
            self._on_transfer = None
            self._on_approval = None
            self._on_approval_for_all = None
            self._stop_watcher()

    def __enter__(self) -> "ERC721Client":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"ERC721Client(contract={self.contract}, listener={self.listener_status.value})"

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _call(self, signature: str, args: Sequence[Any], output_type: str) -> Any:
        raw = self.transport.call(self.contract, signature, args)
        return decode_result(signature, output_type, raw)

    def _write(self, private_key: PrivateKey, signature: str, args: Sequence[Any]):
        receipt = self.transport.write(private_key, self.contract, signature, args)
        _logger.info(
            "Transaction confirmed",
            extra={"contract": self.contract, "method": signature},
        )
        return receipt

    @staticmethod
    def _sender(private_key: PrivateKey, from_address: Optional[str]) -> str:
        if from_address is not None:
            return validate_address(from_address, "from_address")
        return address_from_private_key(private_key)

    def _has_handlers(self) -> bool:
        return (
            self._on_transfer is not None
            or self._on_approval is not None
            or self._on_approval_for_all is not None
        )

    def _watch_or_stop(self) -> ListenerStatus:
        # Caller holds self._lock.
        if self._has_handlers():
            if self._watcher is None or not self._watcher.is_running:
                self._watcher = LogWatcher(
                    self.transport,
                    self.contract,
                    self._dispatch,
                    poll_interval=self.poll_interval,
                    on_error=self._on_listener_error,
                )
                self._watcher.start()
        else:
            self._stop_watcher()
        return self.listener_status

    def _stop_watcher(self) -> None:
        if self._watcher is not None and self._watcher.is_running:
            self._watcher.cancel()

    def _dispatch(self, log: LogEntry) -> None:
        """Route one log to its handler; unknown events are ignored."""
        signature = event_signature_of(log)
        if signature is None:
            return
        with self._lock:
            handler = {
                TRANSFER_EVENT: self._on_transfer,
                APPROVAL_EVENT: self._on_approval,
                APPROVAL_FOR_ALL_EVENT: self._on_approval_for_all,
            }[signature]
        if handler is None:
            return
        try:
            event = decode_event(log)
        except DecodeError as e:
            self._warn_malformed(log, e)
            return
        handler(event)

    def _warn_malformed(self, log: LogEntry, error: DecodeError) -> None:
        _logger.warning(
            "Skipping malformed event log",
            extra={
                "contract": self.contract,
                "event": error.signature,
                "tx_hash": log.transaction_hash,
                "error": str(error),
            },
        )

