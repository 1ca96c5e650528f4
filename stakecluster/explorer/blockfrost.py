# MIT License
# Copyright (c) 2025 Hashborn

import logging
import time
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry
from typing import Any, Dict, List, Optional, Set
from .data_source import BlockchainDataSource
from ..protocol.types.common import MalformedAddress, ProviderError, ProviderUnavailable
from ..protocol.types.ledger import Utxo, Transaction, RewardAccountInfo
from ..protocol.types.value import Value
from ..protocol.crypto.addresses import resolve_payment_credential, resolve_staking_credential
from ..protocol.config.params import (
    NetworkConfig, COIN_UNIT, PAGE_SIZE, REQUEST_TIMEOUT_SEC, MAX_RETRIES, RETRY_BACKOFF_FACTOR
)
from ..observability.metrics import record_provider_request

logger = logging.getLogger(__name__)

# Blockfrost answers these when the project id is missing, invalid, over quota or banned
UNAVAILABLE_STATUS_CODES = (401, 402, 403, 418)
RETRY_STATUS_CODES = (429, 500, 502, 503, 504)

def build_session(max_retries: int = MAX_RETRIES) -> requests.Session:
    """Session with retry/backoff on throttling and transient server errors."""
    retry = Retry(
        total=max_retries,
        backoff_factor=RETRY_BACKOFF_FACTOR,
        status_forcelist=RETRY_STATUS_CODES,
        allowed_methods=["GET"],
        raise_on_status=False
    )
    session = requests.Session()
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session

def parse_value(amount: List[Dict[str, str]]) -> Value:
    """Converts a Blockfrost amount list into a Value."""
    coins = 0
    assets: Dict[str, int] = {}
    for entry in amount:
        quantity = int(entry["quantity"])
        if entry["unit"] == COIN_UNIT:
            coins += quantity
        else:
            assets[entry["unit"]] = assets.get(entry["unit"], 0) + quantity
    return Value(coins=coins, assets=assets)

class BlockfrostDataSource(BlockchainDataSource):
    """A blockchain data source that uses Blockfrost as a data provider."""

    def __init__(self,
                 project_id: Optional[str],
                 network: NetworkConfig,
                 session: Optional[requests.Session] = None,
                 timeout: float = REQUEST_TIMEOUT_SEC,
                 max_retries: int = MAX_RETRIES):
        if not project_id:
            raise ProviderUnavailable("Blockfrost project id is not set. Pass --project-id or set API_KEY.")

        self.network = network
        self.base_url = network.blockfrost_url.rstrip("/")
        self.timeout = timeout
        self.session = session if session is not None else build_session(max_retries)
        self.session.headers.update({"project_id": project_id})

    def network_id(self) -> int:
        return self.network.network_id

    # --- HTTP helpers ---
    def _get(self, endpoint: str, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        Performs one GET against Blockfrost.

        Args:
            endpoint: Endpoint template, used as metrics label
            path: Concrete path below the API root

        Raises:
            ProviderUnavailable: credentials rejected or quota exhausted
            ProviderError: any other failure, including 404
        """
        url = f"{self.base_url}/{path}"
        started = time.time()
        try:
            resp = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            record_provider_request(endpoint, "error", time.time() - started)
            raise ProviderError(f"Request to {path} failed: {e}")

        elapsed = time.time() - started

        if resp.status_code in UNAVAILABLE_STATUS_CODES:
            record_provider_request(endpoint, "unavailable", elapsed)
            raise ProviderUnavailable(f"Blockfrost refused the request ({resp.status_code}): {resp.text}")

        if resp.status_code == 404:
            record_provider_request(endpoint, "not_found", elapsed)
            raise ProviderError(f"Not found: {path}", status_code=404)

        if resp.status_code != 200:
            record_provider_request(endpoint, "error", elapsed)
            raise ProviderError(f"Blockfrost error on {path} ({resp.status_code}): {resp.text}", status_code=resp.status_code)

        try:
            payload = resp.json()
        except ValueError as e:
            # Gateways answer HTML pages with status 200
            record_provider_request(endpoint, "error", elapsed)
            raise ProviderError(f"Invalid JSON from {path}: {e}", status_code=resp.status_code)

        record_provider_request(endpoint, "ok", elapsed)
        return payload

    def _get_all(self, endpoint: str, path: str) -> List[Any]:
        """Follows Blockfrost pagination until a short page."""
        items: List[Any] = []
        page = 1
        while True:
            batch = self._get(endpoint, path, params={"count": PAGE_SIZE, "page": page})
            if not isinstance(batch, list):
                raise ProviderError(f"Expected a list from {path}, got {type(batch).__name__}")
            items.extend(batch)
            if len(batch) < PAGE_SIZE:
                return items
            page += 1

    def _utxo_query_target(self, address: str) -> str:
        # Querying by addr_vkh returns every UTXO sharing the payment credential
        try:
            return resolve_payment_credential(address)
        except MalformedAddress:
            return address

    # --- Lookups ---
    def reward_accounts_for(self, address: str) -> Set[str]:
        network_id = self.network_id()
        reward_accounts: Set[str] = set()

        try:
            own = resolve_staking_credential(address, network_id)
            if own:
                reward_accounts.add(own)
        except MalformedAddress as e:
            logger.debug(f"Cannot derive staking credential of {address}: {e}")

        for utxo in self.utxos_for(address):
            try:
                credential = resolve_staking_credential(utxo.address, network_id)
            except MalformedAddress:
                # Byron outputs sharing nothing with the cluster
                continue
            if credential:
                reward_accounts.add(credential)

        return reward_accounts

    def reward_account_info(self, staking_credential: str) -> Optional[RewardAccountInfo]:
        try:
            account = self._get("accounts/{stake}", f"accounts/{staking_credential}")
            return RewardAccountInfo(
                staking_credential=staking_credential,
                rewards=int(account["withdrawable_amount"]),
                staked_amount=int(account["controlled_amount"]),
                pool_id=account.get("pool_id")
            )
        except ProviderError as e:
            if not e.is_not_found:
                logger.warning(f"Failed to get reward account {staking_credential}: {e}")
            return None
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Unexpected account payload for {staking_credential}: {e}")
            return None
    def addresses_for(self, staking_credential: str) -> Set[str]:
        try:
            entries = self._get_all("accounts/{stake}/addresses", f"accounts/{staking_credential}/addresses")
            return {entry["address"] for entry in entries}
        except ProviderError as e:
            if not e.is_not_found:
                logger.warning(f"Failed to get addresses of {staking_credential}: {e}")
            return set()
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Unexpected addresses payload for {staking_credential}: {e}")
            return set()

    def utxos_for(self, address: str) -> List[Utxo]:
        target = self._utxo_query_target(address)
        try:
            entries = self._get_all("addresses/{address}/utxos", f"addresses/{target}/utxos")
            return [
                Utxo(
                    tx_hash=entry["tx_hash"],
                    index=entry["output_index"],
                    address=entry["address"],
                    value=parse_value(entry["amount"])
                )
                for entry in entries
            ]
        except ProviderError as e:
            if not e.is_not_found:
                logger.warning(f"Failed to get UTXOs of {address}: {e}")
            return []
        except (KeyError, TypeError, ValueError) as e:
            # pydantic ValidationError is a ValueError
            logger.warning(f"Unexpected UTXO payload for {address}: {e}")
            return []

    def transactions_for(self, address: str) -> List[Transaction]:
        try:
            entries = self._get_all("addresses/{address}/transactions", f"addresses/{address}/transactions")
            return [
                Transaction(
                    tx_hash=entry["tx_hash"],
                    index=entry["tx_index"],
                    block_height=entry.get("block_height"),
                    block_time=entry.get("block_time")
                )
                for entry in entries
            ]
        except ProviderError as e:
            if not e.is_not_found:
                logger.warning(f"Failed to get transactions of {address}: {e}")
            return []
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Unexpected transactions payload for {address}: {e}")
            return []
