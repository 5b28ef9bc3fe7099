from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

__all__ = ["Network", "NetworkConfig", "NETWORKS", "get_network_config"]


class Network(str, Enum):
    ETHEREUM = "ethereum"
    SEPOLIA = "sepolia"
    BASE = "base"
    BASE_SEPOLIA = "base-sepolia"


@dataclass(frozen=True)
class NetworkConfig:
    name: Network
    chain_id: int
    rpc_url: str


NETWORKS: dict[Network, NetworkConfig] = {
    Network.ETHEREUM: NetworkConfig(
        name=Network.ETHEREUM,
        chain_id=1,
        rpc_url="https://ethereum-rpc.publicnode.com",
    ),
    Network.SEPOLIA: NetworkConfig(
        name=Network.SEPOLIA,
        chain_id=11155111,
        rpc_url="https://ethereum-sepolia-rpc.publicnode.com",
    ),
    Network.BASE: NetworkConfig(
        name=Network.BASE,
        chain_id=8453,
        rpc_url="https://mainnet.base.org",
    ),
    Network.BASE_SEPOLIA: NetworkConfig(
        name=Network.BASE_SEPOLIA,
        chain_id=84532,
        rpc_url="https://sepolia.base.org",
    ),
}


def get_network_config(network: Network, rpc_url: Optional[str] = None) -> NetworkConfig:
    cfg = NETWORKS[Network(network)]
    if rpc_url:
        return replace(cfg, rpc_url=rpc_url)
    return cfg
