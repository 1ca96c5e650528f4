# MIT License
# Copyright (c) 2025 Hashborn

from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Tuple
from .value import Value

class Utxo(BaseModel):
    """Unspent transaction output, identified by (tx_hash, index)."""
    model_config = ConfigDict(frozen=True)

    tx_hash: str            # Hash of the transaction that created this output
    index: int = Field(ge=0) # Output index inside that transaction
    value: Value
    address: str            # Owning address (bech32)

    @property
    def key(self) -> Tuple[str, int]:
        return (self.tx_hash, self.index)

class Transaction(BaseModel):
    model_config = ConfigDict(frozen=True)

    tx_hash: str
    index: int                          # Position of the tx inside its block
    block_height: Optional[int] = None
    block_time: Optional[int] = None    # Unix seconds

class RewardAccountInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    staking_credential: str             # Reward address (stake...)
    rewards: int = Field(default=0, ge=0)       # Withdrawable rewards
    staked_amount: int = Field(default=0, ge=0) # Controlled amount
    pool_id: Optional[str] = None       # None => unstaked

class AddressInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    address: str
    payment_credential: Optional[str] = None  # None for script payment parts
    staking_credential: Optional[str] = None  # None for enterprise/pointer addresses
    balance: Value = Field(default_factory=Value)
    utxos: Tuple[Utxo, ...] = Field(default_factory=tuple)

class DelegationShare(BaseModel):
    """Share of a clustered wallet's total value controlled by one reward account."""
    staking_credential: str
    staked_amount: int
    pool_id: Optional[str] = None
    percentage: Decimal   # 0..100, rounded down to 4 places

    @property
    def is_delegated(self) -> bool:
        return self.pool_id is not None
