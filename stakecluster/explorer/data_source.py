# MIT License
# Copyright (c) 2025 Hashborn

from abc import ABC, abstractmethod
from typing import List, Optional, Set
from ..protocol.types.ledger import Utxo, Transaction, RewardAccountInfo

class BlockchainDataSource(ABC):
    """
    Resolves information about domain entities on the Cardano blockchain.

    Lookups never raise for unknown entities or per-request provider failures:
    those come back as empty collections or None. Only ProviderUnavailable
    (the provider cannot be reached at all) propagates.
    """

    @abstractmethod
    def network_id(self) -> int:
        """Network tag used when deriving staking credentials."""

    @abstractmethod
    def reward_accounts_for(self, address: str) -> Set[str]:
        """Reward accounts controlling UTXOs at this address (shared payment credential included)."""

    @abstractmethod
    def reward_account_info(self, staking_credential: str) -> Optional[RewardAccountInfo]:
        """Info for a reward account, or None if it never interacted with the chain."""

    @abstractmethod
    def addresses_for(self, staking_credential: str) -> Set[str]:
        """Every address that has used this reward account."""

    @abstractmethod
    def utxos_for(self, address: str) -> List[Utxo]:
        """Current unspent outputs controlled by this address."""

    @abstractmethod
    def transactions_for(self, address: str) -> List[Transaction]:
        """Transactions touching this address, oldest first."""
