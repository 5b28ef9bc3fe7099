"""
Exception types for the ERC-721 SDK.

All SDK exceptions inherit from ERC721Error, which carries a machine-readable
error code, an optional transaction hash and a details dictionary. Transport
failures, remote reverts and decoding failures are reported with distinct
subclasses so callers can tell them apart without parsing messages.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

__all__ = [
    "ERC721Error",
    "ValidationError",
    "InvalidAddressError",
    "InvalidTokenIdError",
    "InvalidPrivateKeyError",
    "RpcError",
    "TransactionError",
    "DecodeError",
    "ListenerError",
]


class ERC721Error(Exception):
    """
    Base exception for all ERC-721 SDK errors.

    Attributes:
        message: Human-readable error description.
        code: Machine-readable error code (e.g., "RPC_ERROR").
        tx_hash: Optional transaction hash related to the error.
        details: Optional dictionary with additional error context.

    Example:
        >>> raise ERC721Error(
        ...     "Transaction failed",
        ...     code="TRANSACTION_FAILED",
        ...     tx_hash="0x123...",
        ... )
    """

    def __init__(
        self,
        message: str,
        *,
        code: str = "ERC721_ERROR",
        tx_hash: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.tx_hash = tx_hash
        self.details = details or {}

    def __str__(self) -> str:
        parts = [f"[{self.code}] {self.message}"]
        if self.tx_hash:
            parts.append(f"(tx: {self.tx_hash[:10]}...)")
        return " ".join(parts)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code!r}, "
            f"tx_hash={self.tx_hash!r}, "
            f"details={self.details!r})"
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to a dictionary for JSON serialization.

        Returns:
            Dictionary representation of the error.
        """
        return {
            "error": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "tx_hash": self.tx_hash,
            "details": self.details,
        }


class ValidationError(ERC721Error):
    """Raised when an argument is malformed before anything is sent."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "VALIDATION_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code, details=details)


class InvalidAddressError(ValidationError):
    """Raised when a value is not a 20-byte hex address."""

    def __init__(self, address: str, field: str = "address", reason: str = "invalid address") -> None:
        super().__init__(
            f"{field}: {reason}",
            code="INVALID_ADDRESS",
            details={"address": address, "field": field},
        )
        self.address = address
        self.field = field


class InvalidTokenIdError(ValidationError):
    """Raised when a token id or index is not an unsigned 256-bit integer."""

    def __init__(self, value: Any, field: str = "token_id") -> None:
        super().__init__(
            f"{field} must be an integer in [0, 2**256)",
            code="INVALID_TOKEN_ID",
            details={"value": repr(value), "field": field},
        )
        self.field = field


class InvalidPrivateKeyError(ValidationError):
    """Raised when a private key cannot be parsed. The key itself is never included."""

    def __init__(self) -> None:
        super().__init__(
            "Invalid private key format (key not shown for security)",
            code="INVALID_PRIVATE_KEY",
        )


class RpcError(ERC721Error):
    """Raised when the RPC provider fails or rejects a request."""

    def __init__(
        self,
        message: str,
        *,
        tx_hash: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code="RPC_ERROR", tx_hash=tx_hash, details=details)


class TransactionError(ERC721Error):
    """Raised when a submitted transaction is mined but reverted."""

    def __init__(
        self,
        message: str,
        *,
        tx_hash: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code="TRANSACTION_FAILED", tx_hash=tx_hash, details=details)


class DecodeError(ERC721Error):
    """
    Raised when a contract return value or event log cannot be decoded.

    Attributes:
        signature: Method or event signature that failed to decode.
        result: Placeholder value for the failed read. Address and string
            reads report ``""`` so callers never see a partial value.

    Args:
        subject: Leading words of the message; event logs use ``"event log"``.
    """

    def __init__(
        self,
        signature: str,
        reason: str,
        result: Any = None,
        *,
        subject: str = "result of",
    ) -> None:
        super().__init__(
            f"Cannot decode {subject} {signature}: {reason}",
            code="DECODE_ERROR",
            details={"signature": signature},
        )
        self.signature = signature
        self.result = result


class ListenerError(ERC721Error):
    """Raised when the background event listener terminated on a fatal error."""

    def __init__(self, message: str, *, contract: Optional[str] = None) -> None:
        super().__init__(
            message,
            code="LISTENER_FAILED",
            details={"contract": contract} if contract else None,
        )
        self.contract = contract
