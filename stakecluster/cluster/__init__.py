# MIT License
# Copyright (c) 2025 Hashborn

"""
Clustered wallet discovery and aggregation.
"""

from .wallet import ClusteredWallet
from .discovery import ClusterDiscovery, LoggingProgressMonitor, discover

__all__ = ["ClusteredWallet", "ClusterDiscovery", "LoggingProgressMonitor", "discover"]
