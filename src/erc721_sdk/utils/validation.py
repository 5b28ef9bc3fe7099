"""
Validation utilities for the ERC-721 SDK.

Provides format checks for:
- Ethereum addresses
- Token ids and enumeration indexes (uint256)
- ERC-165 interface ids (bytes4)
- Private keys

These only check that an argument can be ABI-encoded. Contract preconditions
(ownership, approvals, token existence) are left to the contract.

All validation functions raise ValidationError (or subclasses) on failure.
"""

from __future__ import annotations

import re
from typing import Any, Union

from eth_utils import to_checksum_address

from erc721_sdk.constants import PRIVATE_KEY_LENGTH, UINT256_MAX
from erc721_sdk.errors import (
    InvalidAddressError,
    InvalidPrivateKeyError,
    InvalidTokenIdError,
    ValidationError,
)

ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")
BYTES4_PATTERN = re.compile(r"^0x[0-9a-fA-F]{8}$")
PRIVATE_KEY_PATTERN = re.compile(r"^(0x)?[0-9a-fA-F]{64}$")


def validate_address(address: str, field_name: str = "address") -> str:
    """
    Validate Ethereum address format.

    Mixed-case input is accepted without verifying its EIP-55 checksum, the
    same way the contract would accept the raw 20 bytes.

    Args:
        address: Address to validate
        field_name: Field name for error messages

    Returns:
        Checksummed address

    Raises:
        InvalidAddressError: If address is invalid
    """
    if not address:
        raise InvalidAddressError("", field=field_name, reason=f"{field_name} is required")

    if not isinstance(address, str):
        raise InvalidAddressError(
            str(address),
            field=field_name,
            reason=f"{field_name} must be a string",
        )

    if not ADDRESS_PATTERN.match(address):
        raise InvalidAddressError(
            address,
            field=field_name,
            reason="must be 0x followed by 40 hex characters",
        )

    return to_checksum_address(address.lower())


def validate_uint256(value: Any, field_name: str = "token_id") -> int:
    """
    Validate an unsigned 256-bit integer (token id or index).

    Args:
        value: Value to validate
        field_name: Field name for error messages

    Returns:
        The value as int

    Raises:
        InvalidTokenIdError: If value is not an int in [0, 2**256)
    """
    # bool is an int subclass; True is not a token id
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidTokenIdError(value, field=field_name)
    if value < 0 or value > UINT256_MAX:
        raise InvalidTokenIdError(value, field=field_name)
    return value


def validate_bool(value: Any, field_name: str = "approved") -> bool:
    if not isinstance(value, bool):
        raise ValidationError(
            f"{field_name} must be a bool",
            details={"field": field_name, "value": repr(value)},
        )
    return value


def validate_interface_id(interface_id: Union[str, bytes], field_name: str = "interface_id") -> bytes:
    """
    Validate an ERC-165 interface id.

    Args:
        interface_id: ``0x``-prefixed 4-byte hex string or 4 raw bytes
        field_name: Field name for error messages

    Returns:
        The 4 raw bytes
    """
    if isinstance(interface_id, (bytes, bytearray)):
        if len(interface_id) != 4:
            raise ValidationError(
                f"{field_name} must be 4 bytes",
                details={"field": field_name, "length": len(interface_id)},
            )
        return bytes(interface_id)

    if isinstance(interface_id, str) and BYTES4_PATTERN.match(interface_id):
        return bytes.fromhex(interface_id[2:])

    raise ValidationError(
        f"{field_name} must be 0x followed by 8 hex characters",
        details={"field": field_name, "value": repr(interface_id)},
    )


def validate_private_key(private_key: Union[str, bytes]) -> None:
    """
    Check that a private key is 32 bytes of hex (or raw bytes).

    Raises:
        InvalidPrivateKeyError: The message never contains the key.
    """
    if isinstance(private_key, (bytes, bytearray)):
        if len(private_key) != PRIVATE_KEY_LENGTH:
            raise InvalidPrivateKeyError()
        return
    if not isinstance(private_key, str) or not PRIVATE_KEY_PATTERN.match(private_key):
        raise InvalidPrivateKeyError()
