#!/usr/bin/env python3
"""
Example: watch Transfer and ApprovalForAll events

Registers handlers on a client; the background listener starts with the
first handler and stops when the handlers are cleared. Press Ctrl+C to stop.

Run this example:
    NFT_CONTRACT=0x... python examples/watch_transfers.py
"""

import os
import sys
import time

from erc721_sdk import (
    ApprovalForAllEvent,
    ERC721Client,
    ListenerStatus,
    Network,
    TransferEvent,
    ZERO_ADDRESS,
)
from erc721_sdk.utils.logging import configure_logging


def on_transfer(event: TransferEvent) -> None:
    kind = "mint" if event.from_address == ZERO_ADDRESS else "transfer"
    print(f"[{kind}] #{event.token_id} {event.from_address} -> {event.to_address} "
          f"(block {event.log.block_number})")


def on_approval_for_all(event: ApprovalForAllEvent) -> None:
    state = "granted" if event.approved else "revoked"
    print(f"[operator] {event.operator} {state} by {event.owner}")


def main() -> int:
    contract = os.environ.get("NFT_CONTRACT")
    if not contract:
        print("Set NFT_CONTRACT to an ERC-721 contract address")
        return 1

    configure_logging(os.environ.get("LOG_LEVEL", "INFO"))
    network = Network(os.environ.get("NETWORK", Network.ETHEREUM.value))

    nft = ERC721Client.from_network(
        network,
        contract,
        rpc_url=os.environ.get("RPC_URL"),
        poll_interval=float(os.environ.get("POLL_INTERVAL", "4")),
        on_listener_error=lambda e: print(f"[listener] stopped: {e}"),
    )

    print(f"Watching {contract} on {network.value}")
    nft.set_transfer_handler(on_transfer)
    nft.set_approval_for_all_handler(on_approval_for_all)

    try:
        while nft.listener_status == ListenerStatus.RUNNING:
            time.sleep(1)
    except KeyboardInterrupt:
        print()
    finally:
        nft.close()

    print(f"Listener {nft.listener_status.value}")
    return 0 if nft.listener_error is None else 1


if __name__ == "__main__":
    sys.exit(main())
