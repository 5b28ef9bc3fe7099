#!/usr/bin/env python3
"""
Example: read an ERC-721 collection

Prints collection metadata, the interfaces the contract reports through
ERC-165, and the owner and URI of a few tokens.

Run this example:
    NFT_CONTRACT=0x... python examples/read_collection.py
"""

import os
import sys

from erc721_sdk import (
    ERC721Client,
    ERC721Error,
    IERC721_ENUMERABLE_INTERFACE_ID,
    IERC721_METADATA_INTERFACE_ID,
    Network,
)
from erc721_sdk.utils.logging import configure_logging


def main() -> int:
    contract = os.environ.get("NFT_CONTRACT")
    if not contract:
        print("Set NFT_CONTRACT to an ERC-721 contract address")
        return 1

    configure_logging(os.environ.get("LOG_LEVEL", "WARNING"))
    network = Network(os.environ.get("NETWORK", Network.ETHEREUM.value))

    with ERC721Client.from_network(network, contract, rpc_url=os.environ.get("RPC_URL")) as nft:
        print("=" * 60)
        print(f"Collection {contract} on {network.value}")
        print("=" * 60)

        if nft.supports_interface(IERC721_METADATA_INTERFACE_ID):
            print(f"Name:   {nft.name()}")
            print(f"Symbol: {nft.symbol()}")

        if not nft.supports_interface(IERC721_ENUMERABLE_INTERFACE_ID):
            print("Contract is not enumerable, nothing more to list")
            return 0

        supply = nft.total_supply()
        print(f"Total supply: {supply}")
        print()

        for index in range(min(supply, 5)):
            token_id = nft.token_by_index(index)
            try:
                owner = nft.owner_of(token_id)
                uri = nft.token_uri(token_id)
            except ERC721Error as e:
                print(f"  #{token_id}: {e}")
                continue
            print(f"  #{token_id} owned by {owner}")
            print(f"      {uri}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
