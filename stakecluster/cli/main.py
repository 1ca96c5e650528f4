# MIT License
# Copyright (c) 2025 Hashborn

import argparse
import sys
import json
import os
import logging
from ..cluster.discovery import LoggingProgressMonitor, discover
from ..cluster.wallet import ClusteredWallet
from ..explorer.blockfrost import BlockfrostDataSource
from ..explorer.memory import InMemoryDataSource
from ..protocol.types.common import MalformedAddress, ProviderUnavailable, DiscoveryFailed
from ..protocol.crypto.addresses import decode_address
from ..protocol.config.params import DEFAULT_NETWORK, NETWORKS, DENOM, REQUEST_TIMEOUT_SEC, get_network

def get_network_name(args):
    return args.network or os.environ.get("STAKECLUSTER_NETWORK", DEFAULT_NETWORK)

def build_data_source(args):
    if args.fixture:
        return InMemoryDataSource.from_json(args.fixture)

    project_id = args.project_id or os.environ.get("API_KEY")
    return BlockfrostDataSource(project_id, get_network(get_network_name(args)), timeout=args.request_timeout)

class ConsoleProgressMonitor:
    """Track progress of the discovery process logging on the console."""

    def update(self, message: str):
        print(message)

# --- Rendering ---
def render_delegation_state(wallet: ClusteredWallet):
    for share in wallet.delegation_state():
        print(f"Staking credential: {share.staking_credential}")
        if share.is_delegated:
            print(f" - has {share.staked_amount} {DENOM} ({share.percentage}%) staked with pool {share.pool_id}")
        else:
            print(f" - has {share.staked_amount} {DENOM} ({share.percentage}%) unstaked")

def render_report(wallet: ClusteredWallet):
    assets = sorted(wallet.balance.assets.items())

    print("\nResults:\n")
    print(f"Found {len(wallet.addresses)} addresses.")
    print(f"Found {len(wallet.reward_accounts)} reward accounts.")
    print(f"Found coins: {wallet.balance.coins} {DENOM}.")
    print(f"Found withdrawable rewards: {wallet.rewards} {DENOM}.")
    print(f"Wallet Total value: {wallet.total_value} {DENOM} + {json.dumps(assets)}.")

    print("\nDelegation state:\n")
    render_delegation_state(wallet)

# --- Commands ---
def cmd_discover(args):
    try:
        source = build_data_source(args)
    except (ProviderUnavailable, ValueError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    if args.quiet or args.json:
        # Progress still reaches the log under -v
        monitor = LoggingProgressMonitor(level=logging.DEBUG)
    else:
        monitor = ConsoleProgressMonitor()

    try:
        wallet = discover(args.address, source, monitor, timeout=args.timeout)
    except MalformedAddress as e:
        print(f"Error: {e}")
        sys.exit(1)
    except ProviderUnavailable as e:
        print(f"Provider unavailable: {e}")
        sys.exit(1)
    except DiscoveryFailed as e:
        print(f"Discovery failed: {e}")
        sys.exit(1)

    if args.json:
        data = wallet.model_dump(mode="json")
        data["total_value"] = wallet.total_value
        data["delegation"] = [share.model_dump(mode="json") for share in wallet.delegation_state()]
        print(json.dumps(data, indent=2))
        return

    render_report(wallet)

def cmd_transactions(args):
    try:
        decode_address(args.address)
    except MalformedAddress as e:
        print(f"Error: {e}")
        sys.exit(1)

    try:
        source = build_data_source(args)
        txs = source.transactions_for(args.address)
    except (ProviderUnavailable, ValueError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    if not txs:
        print("No transactions found.")
        return

    print(f"{'TxHash':<66} {'Index':<6} {'Height'}")
    print("-" * 82)
    for tx in txs:
        print(f"{tx.tx_hash:<66} {tx.index:<6} {tx.block_height if tx.block_height is not None else '-'}")

def cmd_serve(args):
    try:
        source = build_data_source(args)
    except (ProviderUnavailable, ValueError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    from ..rpc.api import start_rpc_server
    start_rpc_server(source, host=args.host, port=args.port, timeout=args.timeout)

def add_source_args(p):
    p.add_argument("--network", choices=sorted(NETWORKS), help=f"Cardano network (default: {DEFAULT_NETWORK}, env STAKECLUSTER_NETWORK)")
    p.add_argument("--project-id", help="Blockfrost project id (default: env API_KEY)")
    p.add_argument("--fixture", help="Answer from a JSON chain fixture instead of Blockfrost")
    p.add_argument("--request-timeout", type=float, default=REQUEST_TIMEOUT_SEC, help="Per-request timeout in seconds")

def main(argv=None):
    parser = argparse.ArgumentParser(prog="stakecluster", description="Cardano clustered wallet discovery")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Sub-commands")

    p_disc = subparsers.add_parser("discover", help="Discover the clustered wallet of an address")
    p_disc.add_argument("address", help="Seed address (bech32)")
    p_disc.add_argument("--timeout", type=float, help="Overall discovery timeout in seconds")
    p_disc.add_argument("--json", action="store_true", help="Print the wallet as JSON")
    p_disc.add_argument("-q", "--quiet", action="store_true", help="Hide progress messages")
    add_source_args(p_disc)

    p_txs = subparsers.add_parser("transactions", help="List transactions of an address")
    p_txs.add_argument("address", help="Address (bech32)")
    add_source_args(p_txs)

    p_serve = subparsers.add_parser("serve", help="Serve discovery over HTTP")
    p_serve.add_argument("--host", default="0.0.0.0", help="RPC Host")
    p_serve.add_argument("--port", type=int, default=8000, help="RPC Port")
    p_serve.add_argument("--timeout", type=float, help="Per-discovery timeout in seconds")
    add_source_args(p_serve)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s: %(message)s',
        datefmt='%H:%M:%S'
    )

    if args.command == "discover": cmd_discover(args)
    elif args.command == "transactions": cmd_transactions(args)
    elif args.command == "serve": cmd_serve(args)
    else:
        parser.print_help()

if __name__ == "__main__":
    main()
