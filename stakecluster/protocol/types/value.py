# MIT License
# Copyright (c) 2025 Hashborn

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Dict, Iterable

class Value(BaseModel):
    """Native coin amount plus multi-asset quantities keyed by asset id (policy id + hex asset name)."""
    model_config = ConfigDict(frozen=True)

    coins: int = Field(default=0, ge=0)
    assets: Dict[str, int] = Field(default_factory=dict)

    @field_validator("assets")
    @classmethod
    def _non_negative_quantities(cls, assets: Dict[str, int]) -> Dict[str, int]:
        for asset_id, quantity in assets.items():
            if quantity < 0:
                raise ValueError(f"Negative quantity {quantity} for asset {asset_id}")
        return assets

def coalesce_values(values: Iterable[Value]) -> Value:
    """Folds values by pointwise addition. Order does not matter."""
    coins = 0
    assets: Dict[str, int] = {}
    for value in values:
        coins += value.coins
        for asset_id, quantity in value.assets.items():
            assets[asset_id] = assets.get(asset_id, 0) + quantity
    return Value(coins=coins, assets=assets)
