# MIT License
# Copyright (c) 2025 Hashborn

from enum import IntEnum
from typing import Optional

class AddressType(IntEnum):
    """Shelley address header types (high nibble of the first byte)."""
    BASE_KEY_KEY = 0
    BASE_SCRIPT_KEY = 1
    BASE_KEY_SCRIPT = 2
    BASE_SCRIPT_SCRIPT = 3
    POINTER_KEY = 4
    POINTER_SCRIPT = 5
    ENTERPRISE_KEY = 6
    ENTERPRISE_SCRIPT = 7
    BYRON = 8
    REWARD_KEY = 14
    REWARD_SCRIPT = 15

class ClusterError(Exception):
    pass

class MalformedAddress(ClusterError, ValueError):
    """Address text cannot be decoded or lacks a required credential."""

    def __init__(self, address: str, reason: str):
        super().__init__(f"Malformed address {address}: {reason}")
        self.address = address
        self.reason = reason

class ProviderUnavailable(ClusterError):
    """The data provider cannot be reached at all (e.g. missing or rejected credentials)."""
    pass

class ProviderError(ClusterError):
    """A single provider request failed. Downgraded to an empty result by data sources."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404

class DiscoveryFailed(ClusterError):
    pass

class DiscoveryCancelled(DiscoveryFailed):
    pass

class DiscoveryTimeout(DiscoveryFailed):
    pass
