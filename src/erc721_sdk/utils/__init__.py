"""
ERC-721 SDK Utilities.

This module provides logging and argument validation helpers for the SDK.
"""

from erc721_sdk.utils.logging import (
    LogContext,
    configure_logging,
    disable_logging,
    enable_debug,
    get_context_logger,
    get_logger,
    set_level,
)
from erc721_sdk.utils.validation import (
    validate_address,
    validate_bool,
    validate_interface_id,
    validate_private_key,
    validate_uint256,
)

__all__ = [
    # Structured logging
    "get_logger",
    "get_context_logger",
    "configure_logging",
    "set_level",
    "disable_logging",
    "enable_debug",
    "LogContext",
    # Validation
    "validate_address",
    "validate_uint256",
    "validate_bool",
    "validate_interface_id",
    "validate_private_key",
]
