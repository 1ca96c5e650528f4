import pytest
from typing import Dict, Optional
from stakecluster.protocol.crypto.addresses import encode_bech32
from stakecluster.protocol.types.ledger import Utxo
from stakecluster.protocol.types.value import Value

def build_address(payment: Optional[int] = None,
                  stake: Optional[int] = None,
                  network_id: int = 0,
                  payment_script: bool = False,
                  stake_script: bool = False) -> str:
    """Builds a bech32 Shelley address whose hashes are a single repeated byte."""
    if payment is not None and stake is not None:
        addr_type = (1 if payment_script else 0) | (2 if stake_script else 0)
        body = bytes([payment]) * 28 + bytes([stake]) * 28
    elif payment is not None:
        addr_type = 7 if payment_script else 6
        body = bytes([payment]) * 28
    elif stake is not None:
        addr_type = 15 if stake_script else 14
        body = bytes([stake]) * 28
    else:
        raise ValueError("payment or stake required")

    if addr_type >= 14:
        hrp = "stake" if network_id == 1 else "stake_test"
    else:
        hrp = "addr" if network_id == 1 else "addr_test"

    return encode_bech32(hrp, bytes([(addr_type << 4) | network_id]) + body)

def build_utxo(address: str, tx_hash: str, index: int = 0, coins: int = 0, assets: Optional[Dict[str, int]] = None) -> Utxo:
    return Utxo(tx_hash=tx_hash, index=index, address=address, value=Value(coins=coins, assets=assets or {}))

@pytest.fixture
def make_address():
    return build_address

@pytest.fixture
def make_utxo():
    return build_utxo
