"""
Web3.py transport for ERC-721 calls.

Web3Transport exposes the four primitives the contract binding needs:

- ``call``: read-only ``eth_call`` returning raw bytes
- ``write``: sign, submit and wait for a state-changing transaction
- ``get_logs`` / ``block_number``: polling source for event logs

It converts provider exceptions into RpcError (decoding Solidity revert
reasons when the node returns them) and reverted receipts into
TransactionError. It never retries.

Example:
    >>> transport = Web3Transport.from_url("https://sepolia.base.org")
    >>> raw = transport.call(contract, "name()", [])
"""
import threading
from typing import Any, List, Optional, Sequence, Union

from eth_account import Account
from eth_account.signers.local import LocalAccount
from hexbytes import HexBytes
from web3 import Web3
from web3.types import TxParams

from .abi import decode_revert_reason, encode_call
from .constants import (
    DEFAULT_GAS_LIMIT,
    GAS_ESTIMATION_BUFFER,
    MAX_FEE_MULTIPLIER,
    MAX_GAS_LIMIT,
    MIN_MAX_FEE_GWEI,
    PRIORITY_FEE_GWEI,
    PROVIDER_TIMEOUT_SECONDS,
    RECEIPT_TIMEOUT_SECONDS,
)
from .errors import InvalidPrivateKeyError, RpcError, TransactionError, ValidationError
from .models import LogEntry
from .utils.logging import get_logger
from .utils.validation import validate_private_key

__all__ = ["Web3Transport", "address_from_private_key", "load_account", "to_log_entry"]

_logger = get_logger(__name__)

PrivateKey = Union[str, bytes]


def load_account(private_key: PrivateKey) -> LocalAccount:
    """Build a signing account from a private key.

    Raises:
        InvalidPrivateKeyError: The key is never echoed in the message or traceback.
    """
    validate_private_key(private_key)
    # Sanitize private key errors to prevent key leakage in stack traces
    try:
        return Account.from_key(private_key)
    except Exception:
        raise InvalidPrivateKeyError() from None


def address_from_private_key(private_key: PrivateKey) -> str:
    """Derive the checksummed address controlled by a private key."""
    return load_account(private_key).address


def _rpc_error(e: Exception, tx_hash: Optional[str] = None) -> RpcError:
    """Map a provider exception to RpcError, keeping the revert reason if any."""
    reason = None
    data = getattr(e, "data", None)
    if e.args and isinstance(e.args[0], dict):
        reason = e.args[0].get("message") or e.args[0].get("reason")
        data = e.args[0].get("data", data)
    if isinstance(data, str):
        decoded = decode_revert_reason(data)
        if decoded:
            reason = decoded
    return RpcError(
        reason or str(e) or type(e).__name__,
        tx_hash=tx_hash,
        details={"error_type": type(e).__name__},
    )


def to_log_entry(raw: Any) -> LogEntry:
    """Convert a Web3 log (AttributeDict or plain dict with hex strings) to LogEntry."""
    tx_hash = raw.get("transactionHash")
    return LogEntry(
        address=Web3.to_checksum_address(raw["address"]),
        topics=[bytes(HexBytes(t)) for t in raw.get("topics", [])],
        data=bytes(HexBytes(raw.get("data") or b"")),
        block_number=raw.get("blockNumber"),
        transaction_hash=Web3.to_hex(HexBytes(tx_hash)) if tx_hash is not None else None,
        log_index=raw.get("logIndex"),
    )


class Web3Transport:
    """JSON-RPC primitives over a Web3 instance.

    Args:
        w3: Connected Web3 instance
        chain_id: Chain id used when signing (queried from the node if omitted)
        tx_overrides: Extra fields merged into every transaction
        manual_nonce: Track nonces locally instead of asking the node each time
        receipt_timeout: Seconds to wait for a transaction receipt
    """

    def __init__(
        self,
        w3: Web3,
        chain_id: Optional[int] = None,
        tx_overrides: Optional[dict] = None,
        manual_nonce: bool = False,
        receipt_timeout: float = RECEIPT_TIMEOUT_SECONDS,
    ):
        self.w3 = w3
        self._chain_id = chain_id
        self.tx_overrides = tx_overrides or {}
        self.manual_nonce = manual_nonce
        self.receipt_timeout = receipt_timeout
        self._nonce_lock = threading.Lock()
        self._next_nonce: dict[str, int] = {}

    @classmethod
    def from_url(
        cls,
        rpc_url: str,
        timeout: int = PROVIDER_TIMEOUT_SECONDS,
        **kwargs: Any,
    ) -> "Web3Transport":
        """Create a transport over an HTTP provider with a request timeout."""
        w3 = Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": timeout}))
        return cls(w3, **kwargs)

    @property
    def chain_id(self) -> int:
        if self._chain_id is None:
            self._chain_id = self.w3.eth.chain_id
        return self._chain_id

    # ------------------------------------------------------------------
    # Primitives
    # ------------------------------------------------------------------
    def call(self, contract: str, signature: str, args: Sequence[Any]) -> bytes:
        """Execute a read-only contract call.

        Args:
            contract: Contract address
            signature: Canonical method signature, e.g. ``"ownerOf(uint256)"``
            args: Arguments in ABI order

        Returns:
            Raw ABI-encoded return data

        Raises:
            ValidationError: If the arguments cannot be encoded
            RpcError: If the provider fails or the call reverts
        """
        data = encode_call(signature, args)
        try:
            return bytes(self.w3.eth.call({"to": contract, "data": data}))
        except Exception as e:
            raise _rpc_error(e) from e

    def write(
        self,
        private_key: PrivateKey,
        contract: str,
        signature: str,
        args: Sequence[Any],
    ):
        """Sign and submit a contract transaction, waiting for the receipt.

        Args:
            private_key: Key of the sending account
            contract: Contract address
            signature: Canonical method signature
            args: Arguments in ABI order

        Returns:
            Transaction receipt

        Raises:
            TransactionError: If the transaction was mined but reverted (status != 1)
            RpcError: If estimation, submission or receipt polling fails
        """
        account = load_account(private_key)
        data = encode_call(signature, args)
        gas = self._estimate_gas({"from": account.address, "to": contract, "data": data})
        tx: TxParams = {
            **self._tx_meta(account.address, gas),
            "to": contract,
            "data": data,
        }
        _logger.debug(
            "Submitting transaction",
            extra={"contract": contract, "method": signature, "sender": account.address},
        )
        return self._build_and_send(account, tx)

    def get_logs(self, contract: str, from_block: int, to_block: int) -> List[LogEntry]:
        """Fetch the logs emitted by ``contract`` in ``[from_block, to_block]``."""
        try:
            raw_logs = self.w3.eth.get_logs(
                {"address": contract, "fromBlock": from_block, "toBlock": to_block}
            )
        except Exception as e:
            raise _rpc_error(e) from e
        return [to_log_entry(raw) for raw in raw_logs]

    def block_number(self) -> int:
        try:
            return self.w3.eth.block_number
        except Exception as e:
            raise _rpc_error(e) from e

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _build_and_send(self, account: LocalAccount, tx: TxParams):
        """Sign and send a transaction, waiting for receipt.

        Raises:
            TransactionError: If transaction fails (status != 1)
            RpcError: If RPC call fails or reverts
        """
        tx_hash = None
        try:
            signed = account.sign_transaction(tx)
            tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
            receipt = self.w3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self.receipt_timeout
            )
        except Exception as e:
            self._reset_nonce(account.address)
            raise _rpc_error(e, Web3.to_hex(tx_hash) if tx_hash is not None else None) from e

        if receipt["status"] != 1:
            hex_hash = Web3.to_hex(tx_hash)
            _logger.warning(
                "Transaction reverted",
                extra={"tx_hash": hex_hash, "block": receipt.get("blockNumber")},
            )
            raise TransactionError(f"Transaction failed: {hex_hash}", tx_hash=hex_hash)
        return receipt

    def _tx_meta(self, sender: str, gas: Optional[int] = None) -> TxParams:
        """Build transaction metadata with dynamic EIP-1559 gas pricing."""
        try:
            nonce = self._nonce(sender)
            latest_block = self.w3.eth.get_block("latest")
        except Exception as e:
            raise _rpc_error(e) from e
        base_fee = latest_block.get("baseFeePerGas", 0)

        max_priority_fee = Web3.to_wei(PRIORITY_FEE_GWEI, "gwei")
        max_fee_per_gas = max(
            base_fee * MAX_FEE_MULTIPLIER + max_priority_fee,
            Web3.to_wei(MIN_MAX_FEE_GWEI, "gwei"),
        )

        meta: TxParams = {
            "from": sender,
            "nonce": nonce,
            "chainId": self.chain_id,
            "gas": gas or DEFAULT_GAS_LIMIT,
            "maxFeePerGas": max_fee_per_gas,
            "maxPriorityFeePerGas": max_priority_fee,
        }
        merged = {**meta, **self.tx_overrides}

        if merged.get("gas", 0) > MAX_GAS_LIMIT:
            raise ValidationError(f"Gas limit ({merged['gas']}) exceeds maximum ({MAX_GAS_LIMIT})")

        return merged

    def _estimate_gas(self, tx: TxParams, buffer: float = GAS_ESTIMATION_BUFFER) -> int:
        """Estimate gas with a safety buffer, capped at MAX_GAS_LIMIT.

        Raises:
            RpcError: The node reports a revert here for most failing transfers.
        """
        try:
            base = self.w3.eth.estimate_gas(tx)
        except Exception as e:
            raise _rpc_error(e) from e
        return min(int(base * buffer), MAX_GAS_LIMIT)

    def _nonce(self, sender: str) -> int:
        if not self.manual_nonce:
            return self.w3.eth.get_transaction_count(sender, "pending")
        with self._nonce_lock:
            if sender not in self._next_nonce:
                self._next_nonce[sender] = self.w3.eth.get_transaction_count(sender, "pending")
            nonce = self._next_nonce[sender]
            self._next_nonce[sender] = nonce + 1
            return nonce

    def _reset_nonce(self, sender: str) -> None:
        # Failed submissions may leave a gap; resync from the node next time.
        with self._nonce_lock:
            self._next_nonce.pop(sender, None)
