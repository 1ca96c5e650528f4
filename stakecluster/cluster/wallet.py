# MIT License
# Copyright (c) 2025 Hashborn

from decimal import Decimal, ROUND_DOWN
from pydantic import BaseModel, ConfigDict
from typing import Dict, Iterable, List, Tuple
from ..protocol.types.ledger import Utxo, AddressInfo, RewardAccountInfo, DelegationShare
from ..protocol.types.value import Value, coalesce_values

PERCENT_PLACES = Decimal("0.0001")

class ClusteredWallet(BaseModel):
    """
    Group of addresses that belong to the same entity, linked directly or
    indirectly through shared payment or staking credentials.
    """
    model_config = ConfigDict(frozen=True)

    seed_address: str
    addresses: Tuple[AddressInfo, ...]
    reward_accounts: Tuple[RewardAccountInfo, ...]
    utxos: Tuple[Utxo, ...]     # Unique by (tx_hash, index)
    balance: Value              # Coalesced value of utxos
    rewards: int                # Sum of withdrawable rewards

    @classmethod
    def from_parts(cls,
                   seed_address: str,
                   addresses: Iterable[AddressInfo],
                   reward_accounts: Iterable[RewardAccountInfo]) -> "ClusteredWallet":
        """Aggregates per-address and per-account results into one wallet."""
        addresses = tuple(addresses)
        reward_accounts = tuple(reward_accounts)

        # Same output may be reported by several addresses sharing a payment credential
        unique: Dict[Tuple[str, int], Utxo] = {}
        for info in addresses:
            for utxo in info.utxos:
                unique[utxo.key] = utxo
        utxos = tuple(unique.values())

        return cls(
            seed_address=seed_address,
            addresses=addresses,
            reward_accounts=reward_accounts,
            utxos=utxos,
            balance=coalesce_values(utxo.value for utxo in utxos),
            rewards=sum(account.rewards for account in reward_accounts)
        )

    @property
    def total_value(self) -> int:
        """Coins plus withdrawable rewards, in lovelace."""
        return self.balance.coins + self.rewards

    def get_address(self, address: str) -> AddressInfo:
        for info in self.addresses:
            if info.address == address:
                return info
        raise KeyError(address)

    def delegation_state(self) -> List[DelegationShare]:
        """Share of the total value each reward account controls, and where it is delegated."""
        total = self.total_value
        shares = []
        for account in self.reward_accounts:
            if total > 0:
                percentage = (Decimal(account.staked_amount) / Decimal(total) * 100).quantize(PERCENT_PLACES, rounding=ROUND_DOWN)
            else:
                percentage = Decimal("0").quantize(PERCENT_PLACES)
            shares.append(DelegationShare(
                staking_credential=account.staking_credential,
                staked_amount=account.staked_amount,
                pool_id=account.pool_id,
                percentage=percentage
            ))
        return shares

    @staticmethod
    def discover(seed_address: str, data_source, progress_monitor=None, **kwargs) -> "ClusteredWallet":
        """
        Recursively finds addresses based on shared payment or staking credentials.

        Args:
            seed_address: The address to start the discovery process from
            data_source: BlockchainDataSource used to reveal links
            progress_monitor: Optional object with update(message)
            **kwargs: cancel_event / timeout, see ClusterDiscovery
        """
        from .discovery import discover
        return discover(seed_address, data_source, progress_monitor, **kwargs)
