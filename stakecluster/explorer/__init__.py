# MIT License
# Copyright (c) 2025 Hashborn

"""
Blockchain data sources used by cluster discovery.
"""

from .data_source import BlockchainDataSource
from .blockfrost import BlockfrostDataSource
from .memory import InMemoryDataSource, ChainFixture

__all__ = [
    "BlockchainDataSource",
    "BlockfrostDataSource",
    "InMemoryDataSource",
    "ChainFixture",
]
