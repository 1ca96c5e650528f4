# MIT License
# Copyright (c) 2025 Hashborn

import logging
from pydantic import BaseModel, Field
from typing import Dict, List, Optional, Set
from .data_source import BlockchainDataSource
from ..protocol.types.common import MalformedAddress
from ..protocol.types.ledger import Utxo, Transaction, RewardAccountInfo
from ..protocol.crypto.addresses import resolve_payment_credential, resolve_staking_credential

logger = logging.getLogger(__name__)

class ChainFixture(BaseModel):
    """Snapshot of the chain entities an offline discovery needs."""
    network_id: int = 0
    utxos: List[Utxo] = Field(default_factory=list)
    reward_accounts: List[RewardAccountInfo] = Field(default_factory=list)
    # Extra stake -> addresses links (addresses that used the account but hold no UTXO now)
    account_addresses: Dict[str, List[str]] = Field(default_factory=dict)
    transactions: Dict[str, List[Transaction]] = Field(default_factory=dict)

class InMemoryDataSource(BlockchainDataSource):
    """
    Data source answering from a ChainFixture, with the same linking rules as the
    Blockfrost adapter: UTXOs are looked up by payment credential and reward
    accounts come from the owners of those UTXOs.
    """

    def __init__(self, fixture: ChainFixture):
        self.fixture = fixture
        self._infos: Dict[str, RewardAccountInfo] = {
            info.staking_credential: info for info in fixture.reward_accounts
        }

    @classmethod
    def from_json(cls, path: str) -> "InMemoryDataSource":
        with open(path, "r") as f:
            fixture = ChainFixture.model_validate_json(f.read())
        logger.info(f"Loaded fixture {path}: {len(fixture.utxos)} UTXOs, {len(fixture.reward_accounts)} reward accounts")
        return cls(fixture)

    def network_id(self) -> int:
        return self.fixture.network_id

    def _staking_credential(self, address: str) -> Optional[str]:
        try:
            return resolve_staking_credential(address, self.fixture.network_id)
        except MalformedAddress:
            return None

    def _payment_key(self, address: str) -> str:
        try:
            return resolve_payment_credential(address)
        except MalformedAddress:
            return address

    def reward_accounts_for(self, address: str) -> Set[str]:
        reward_accounts: Set[str] = set()
        own = self._staking_credential(address)
        if own:
            reward_accounts.add(own)

        for utxo in self.utxos_for(address):
            credential = self._staking_credential(utxo.address)
            if credential:
                reward_accounts.add(credential)
        return reward_accounts

    def reward_account_info(self, staking_credential: str) -> Optional[RewardAccountInfo]:
        return self._infos.get(staking_credential)

    def addresses_for(self, staking_credential: str) -> Set[str]:
        addresses = set(self.fixture.account_addresses.get(staking_credential, []))
        for utxo in self.fixture.utxos:
            if self._staking_credential(utxo.address) == staking_credential:
                addresses.add(utxo.address)
        return addresses

    def utxos_for(self, address: str) -> List[Utxo]:
        key = self._payment_key(address)
        return [utxo for utxo in self.fixture.utxos if self._payment_key(utxo.address) == key]

    def transactions_for(self, address: str) -> List[Transaction]:
        return list(self.fixture.transactions.get(address, []))
