"""Constants for the ERC-721 SDK.

This module defines the canonical ERC-721 method and event signatures,
ERC-165 interface identifiers, ABI encoding sizes, gas parameters and
listener defaults.
"""

# ABI Encoding Constants
ABI_SELECTOR_LENGTH = 4
ABI_WORD_LENGTH = 32
REVERT_SELECTOR = "0x08c379a0"
UINT256_MAX = 2**256 - 1

# Ethereum Constants
ADDRESS_LENGTH = 20
PRIVATE_KEY_LENGTH = 32
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
EMPTY_ADDRESS = ""

# ERC-721 methods (IERC721)
BALANCE_OF = "balanceOf(address)"
OWNER_OF = "ownerOf(uint256)"
SAFE_TRANSFER_FROM = "safeTransferFrom(address,address,uint256)"
SAFE_TRANSFER_FROM_WITH_DATA = "safeTransferFrom(address,address,uint256,bytes)"
TRANSFER_FROM = "transferFrom(address,address,uint256)"
APPROVE = "approve(address,uint256)"
SET_APPROVAL_FOR_ALL = "setApprovalForAll(address,bool)"
GET_APPROVED = "getApproved(uint256)"
IS_APPROVED_FOR_ALL = "isApprovedForAll(address,address)"

# IERC721Metadata
NAME = "name()"
SYMBOL = "symbol()"
TOKEN_URI = "tokenURI(uint256)"

# IERC721Enumerable
TOTAL_SUPPLY = "totalSupply()"
TOKEN_BY_INDEX = "tokenByIndex(uint256)"
TOKEN_OF_OWNER_BY_INDEX = "tokenOfOwnerByIndex(address,uint256)"

# ERC-165
SUPPORTS_INTERFACE = "supportsInterface(bytes4)"
IERC721_INTERFACE_ID = "0x80ac58cd"
IERC721_METADATA_INTERFACE_ID = "0x5b5e139f"
IERC721_ENUMERABLE_INTERFACE_ID = "0x780e9d63"

# Events
TRANSFER_EVENT = "Transfer(address,address,uint256)"
APPROVAL_EVENT = "Approval(address,address,uint256)"
APPROVAL_FOR_ALL_EVENT = "ApprovalForAll(address,address,bool)"

# Gas Constants
DEFAULT_GAS_LIMIT = 200_000
GAS_ESTIMATION_BUFFER = 1.15
MAX_FEE_MULTIPLIER = 2
MIN_MAX_FEE_GWEI = "0.01"
PRIORITY_FEE_GWEI = "0.01"
MAX_GAS_LIMIT = 1_000_000  # safeTransferFrom into a receiver contract can be costly

# Network Constants
PROVIDER_TIMEOUT_SECONDS = 30
RECEIPT_TIMEOUT_SECONDS = 120

# Listener Constants
DEFAULT_POLL_INTERVAL = 2.0  # seconds between eth_getLogs polls
MAX_BLOCK_RANGE = 2_000  # many providers cap eth_getLogs ranges

__all__ = [
    "ABI_SELECTOR_LENGTH",
    "ABI_WORD_LENGTH",
    "REVERT_SELECTOR",
    "UINT256_MAX",
    "ADDRESS_LENGTH",
    "PRIVATE_KEY_LENGTH",
    "ZERO_ADDRESS",
    "EMPTY_ADDRESS",
    # Methods
    "BALANCE_OF",
    "OWNER_OF",
    "SAFE_TRANSFER_FROM",
    "SAFE_TRANSFER_FROM_WITH_DATA",
    "TRANSFER_FROM",
    "APPROVE",
    "SET_APPROVAL_FOR_ALL",
    "GET_APPROVED",
    "IS_APPROVED_FOR_ALL",
    "NAME",
    "SYMBOL",
    "TOKEN_URI",
    "TOTAL_SUPPLY",
    "TOKEN_BY_INDEX",
    "TOKEN_OF_OWNER_BY_INDEX",
    "SUPPORTS_INTERFACE",
    "IERC721_INTERFACE_ID",
    "IERC721_METADATA_INTERFACE_ID",
    "IERC721_ENUMERABLE_INTERFACE_ID",
    # Events
    "TRANSFER_EVENT",
    "APPROVAL_EVENT",
    "APPROVAL_FOR_ALL_EVENT",
    # Gas
    "DEFAULT_GAS_LIMIT",
    "GAS_ESTIMATION_BUFFER",
    "MAX_FEE_MULTIPLIER",
    "MIN_MAX_FEE_GWEI",
    "PRIORITY_FEE_GWEI",
    "MAX_GAS_LIMIT",
    "PROVIDER_TIMEOUT_SECONDS",
    "RECEIPT_TIMEOUT_SECONDS",
    "DEFAULT_POLL_INTERVAL",
    "MAX_BLOCK_RANGE",
]
