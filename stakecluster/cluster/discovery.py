# MIT License
# Copyright (c) 2025 Hashborn

"""
Cluster discovery.

Walks the implicit graph whose nodes are addresses and reward accounts and
whose edges are revealed by the data source: an address links to the reward
accounts controlling its UTXOs, a reward account links to every address that
used it. The walk runs to a fixpoint, then per-entity details are fetched and
folded into a ClusteredWallet.
"""

import logging
import threading
import time
from collections import deque
from typing import Any, Callable, Deque, Dict, List, Optional
from .wallet import ClusteredWallet
from ..explorer.data_source import BlockchainDataSource
from ..protocol.types.common import (
    MalformedAddress, ProviderUnavailable, DiscoveryFailed, DiscoveryCancelled, DiscoveryTimeout
)
from ..protocol.types.ledger import AddressInfo, RewardAccountInfo
from ..protocol.types.value import coalesce_values
from ..protocol.crypto.addresses import decode_address, resolve_payment_credential, resolve_staking_credential
from ..observability.metrics import record_discovery, update_metrics

logger = logging.getLogger(__name__)

class LoggingProgressMonitor:
    """Progress monitor that forwards every update to a logger."""

    def __init__(self, log: Optional[logging.Logger] = None, level: int = logging.INFO):
        self.log = log or logger
        self.level = level

    def update(self, message: str) -> None:
        self.log.log(self.level, message)

class ClusterDiscovery:
    """
    State of one discovery run.

    Args:
        data_source: Collaborator answering graph and detail lookups
        progress_monitor: Optional object with update(message); best effort only
        cancel_event: Optional event; when set, the run stops with DiscoveryCancelled
        timeout: Optional overall budget in seconds; exceeded => DiscoveryTimeout
    """

    def __init__(self,
                 data_source: BlockchainDataSource,
                 progress_monitor: Any = None,
                 cancel_event: Optional[threading.Event] = None,
                 timeout: Optional[float] = None):
        self.data_source = data_source
        self.progress_monitor = progress_monitor
        self.cancel_event = cancel_event
        self.timeout = timeout
        self._reset()

    def _reset(self):
        # Dicts used as insertion-ordered sets
        self.expanded: Dict[str, None] = {}
        self.visited_reward_accounts: Dict[str, None] = {}
        self.cluster_addresses: Dict[str, None] = {}
        self.frontier: Deque[str] = deque()
        self._deadline: Optional[float] = None

    def run(self, seed_address: str) -> ClusteredWallet:
        """
        Discovers the cluster around seed_address.

        Raises:
            MalformedAddress: seed does not decode or is a reward address
            ProviderUnavailable: data source cannot be reached at all
            DiscoveryFailed: any other data source failure, cancellation or timeout
        """
        if decode_address(seed_address).payment_hash is None:
            raise MalformedAddress(seed_address, "reward addresses cannot seed a cluster")

        self._reset()
        started = time.monotonic()
        if self.timeout is not None:
            self._deadline = started + self.timeout

        try:
            wallet = self._discover(seed_address)
        except DiscoveryCancelled:
            record_discovery("cancelled", time.monotonic() - started)
            raise
        except DiscoveryTimeout:
            record_discovery("timeout", time.monotonic() - started)
            raise
        except (MalformedAddress, ProviderUnavailable, DiscoveryFailed):
            record_discovery("failed", time.monotonic() - started)
            raise
        except Exception as e:
            record_discovery("failed", time.monotonic() - started)
            raise DiscoveryFailed(f"Discovery from {seed_address} failed: {e}") from e

        record_discovery("ok", time.monotonic() - started)
        update_metrics(wallet)
        return wallet

    def _discover(self, seed_address: str) -> ClusteredWallet:
        self._notify(f"Starting cluster discovery from seed {seed_address}.")

        self.cluster_addresses[seed_address] = None
        self.frontier.append(seed_address)
        self._expand()

        addresses = self._collect_addresses()
        reward_accounts = self._collect_reward_accounts()
        wallet = ClusteredWallet.from_parts(seed_address, addresses, reward_accounts)

        logger.info(
            f"Cluster of {seed_address}: {len(wallet.addresses)} addresses, "
            f"{len(wallet.reward_accounts)} reward accounts, {len(wallet.utxos)} UTXOs"
        )
        self._notify("Cluster discovery complete.")
        return wallet

    def _expand(self):
        """Runs the frontier to a fixpoint."""
        while self.frontier:
            self._checkpoint()
            address = self.frontier.popleft()

            if address in self.expanded:
                continue
            self.expanded[address] = None

            self._notify(f"Getting reward accounts for {address}.")
            reward_accounts = self._call(self.data_source.reward_accounts_for, address)

            for reward_account in sorted(reward_accounts):
                if reward_account in self.visited_reward_accounts:
                    continue
                self.visited_reward_accounts[reward_account] = None

                self._notify(f"Searching {reward_account} for new addresses...")
                found = self._call(self.data_source.addresses_for, reward_account)

                new_count = 0
                for candidate in sorted(found):
                    if candidate in self.cluster_addresses:
                        continue
                    self.cluster_addresses[candidate] = None
                    self.frontier.append(candidate)
                    new_count += 1

                self._notify(f"Found {new_count} new addresses.")

    def _collect_addresses(self) -> List[AddressInfo]:
        network_id = self.data_source.network_id()
        infos = []
        for address in self.cluster_addresses:
            utxos = self._call(self.data_source.utxos_for, address)
            infos.append(AddressInfo(
                address=address,
                payment_credential=self._payment_credential(address),
                staking_credential=self._staking_credential(address, network_id),
                balance=coalesce_values(utxo.value for utxo in utxos),
                utxos=utxos
            ))
        return infos

    def _collect_reward_accounts(self) -> List[RewardAccountInfo]:
        infos = []
        for reward_account in self.visited_reward_accounts:
            info = self._call(self.data_source.reward_account_info, reward_account)
            if info is None:
                logger.debug(f"Reward account {reward_account} has no on-chain info, skipping")
                continue
            infos.append(info)
        return infos

    def _payment_credential(self, address: str) -> Optional[str]:
        try:
            return resolve_payment_credential(address)
        except MalformedAddress as e:
            logger.warning(f"No payment credential for cluster member: {e}")
            return None

    def _staking_credential(self, address: str, network_id: int) -> Optional[str]:
        try:
            return resolve_staking_credential(address, network_id)
        except MalformedAddress as e:
            logger.warning(f"No staking credential for cluster member: {e}")
            return None

    def _checkpoint(self):
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise DiscoveryCancelled("Cluster discovery cancelled")
        if self._deadline is not None and time.monotonic() > self._deadline:
            raise DiscoveryTimeout(f"Cluster discovery exceeded {self.timeout}s")

    def _call(self, fn: Callable, *args):
        self._checkpoint()
        return fn(*args)

    def _notify(self, message: str):
        if self.progress_monitor is None:
            return
        try:
            self.progress_monitor.update(message)
        except Exception as e:
            logger.warning(f"Progress monitor failed: {e}")

def discover(seed_address: str,
             data_source: BlockchainDataSource,
             progress_monitor: Any = None,
             cancel_event: Optional[threading.Event] = None,
             timeout: Optional[float] = None) -> ClusteredWallet:
    """Recursively finds addresses sharing payment or staking credentials with seed_address."""
    return ClusterDiscovery(data_source, progress_monitor, cancel_event, timeout).run(seed_address)
