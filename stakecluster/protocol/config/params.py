# MIT License
# Copyright (c) 2025 Hashborn

from typing import Dict

# Global Constants
DENOM = "lovelace"
COIN_UNIT = "lovelace"

# Bech32 encoding
MAX_BECH32_LENGTH = 1023
PAYMENT_KEY_HASH_PREFIX = "addr_vkh"
REWARD_PREFIX_MAINNET = "stake"
REWARD_PREFIX_TESTNET = "stake_test"
CREDENTIAL_HASH_LENGTH = 28

# Provider defaults
REQUEST_TIMEOUT_SEC = 30
MAX_RETRIES = 3
RETRY_BACKOFF_FACTOR = 0.5
PAGE_SIZE = 100  # Blockfrost max page size

class NetworkConfig:
    def __init__(self,
                 name: str,
                 network_id: int,
                 blockfrost_url: str):
        self.name = name
        self.network_id = network_id
        self.blockfrost_url = blockfrost_url

    def __repr__(self) -> str:
        return f"NetworkConfig(name={self.name!r}, network_id={self.network_id})"

NETWORKS: Dict[str, NetworkConfig] = {
    "mainnet": NetworkConfig(
        name="mainnet",
        network_id=1,
        blockfrost_url="https://cardano-mainnet.blockfrost.io/api/v0"
    ),
    # Testnets share network id 0
    "preprod": NetworkConfig(
        name="preprod",
        network_id=0,
        blockfrost_url="https://cardano-preprod.blockfrost.io/api/v0"
    ),
    "preview": NetworkConfig(
        name="preview",
        network_id=0,
        blockfrost_url="https://cardano-preview.blockfrost.io/api/v0"
    )
}

DEFAULT_NETWORK = "preprod"

def get_network(name: str) -> NetworkConfig:
    if name not in NETWORKS:
        raise ValueError(f"Unknown network '{name}' (expected one of: {', '.join(NETWORKS)})")
    return NETWORKS[name]
