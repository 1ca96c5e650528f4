# MIT License
# Copyright (c) 2025 Hashborn

"""
Prometheus Metrics Exporter

Exports cluster discovery metrics in Prometheus format.

Metrics:
- Provider requests by endpoint and outcome, request latency
- Discovery runs by outcome, discovery duration
- Size and value of the last discovered cluster
"""

from prometheus_client import Counter, Gauge, Histogram, CollectorRegistry

# Create registry for metrics
metrics_registry = CollectorRegistry()

# ═══════════════════════════════════════════════════════════════════
# PROVIDER METRICS
# ═══════════════════════════════════════════════════════════════════

provider_requests_total = Counter(
    'stakecluster_provider_requests_total',
    'Total number of data provider requests',
    ['endpoint', 'outcome'],
    registry=metrics_registry
)

provider_request_seconds = Histogram(
    'stakecluster_provider_request_seconds',
    'Latency of data provider requests in seconds',
    ['endpoint'],
    buckets=[0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10, 30],
    registry=metrics_registry
)

# ═══════════════════════════════════════════════════════════════════
# DISCOVERY METRICS
# ═══════════════════════════════════════════════════════════════════

discovery_runs_total = Counter(
    'stakecluster_discovery_runs_total',
    'Total number of cluster discovery runs',
    ['outcome'],
    registry=metrics_registry
)

discovery_duration_seconds = Histogram(
    'stakecluster_discovery_duration_seconds',
    'Wall time of a cluster discovery run in seconds',
    buckets=[1, 5, 10, 30, 60, 120, 300, 600],
    registry=metrics_registry
)

cluster_addresses = Gauge(
    'stakecluster_cluster_addresses',
    'Number of addresses in the last discovered cluster',
    registry=metrics_registry
)

cluster_reward_accounts = Gauge(
    'stakecluster_cluster_reward_accounts',
    'Number of reward accounts in the last discovered cluster',
    registry=metrics_registry
)

cluster_utxos = Gauge(
    'stakecluster_cluster_utxos',
    'Number of UTXOs in the last discovered cluster',
    registry=metrics_registry
)

cluster_coins = Gauge(
    'stakecluster_cluster_coins',
    'Coins (lovelace) held by the last discovered cluster',
    registry=metrics_registry
)

cluster_rewards = Gauge(
    'stakecluster_cluster_rewards',
    'Withdrawable rewards (lovelace) of the last discovered cluster',
    registry=metrics_registry
)

# ═══════════════════════════════════════════════════════════════════
# HELPER FUNCTIONS
# ═══════════════════════════════════════════════════════════════════

def record_provider_request(endpoint: str, outcome: str, elapsed: float):
    """
    Record one provider round trip.

    Args:
        endpoint: Endpoint template (e.g. 'accounts/{stake}/addresses')
        outcome: 'ok', 'not_found', 'error' or 'unavailable'
        elapsed: Seconds spent waiting on the provider
    """
    provider_requests_total.labels(endpoint=endpoint, outcome=outcome).inc()
    provider_request_seconds.labels(endpoint=endpoint).observe(elapsed)


def record_discovery(outcome: str, elapsed: float):
    discovery_runs_total.labels(outcome=outcome).inc()
    discovery_duration_seconds.observe(elapsed)


def update_metrics(wallet):
    """
    Update cluster gauges from a discovered wallet.

    Args:
        wallet: ClusteredWallet instance
    """
    cluster_addresses.set(len(wallet.addresses))
    cluster_reward_accounts.set(len(wallet.reward_accounts))
    cluster_utxos.set(len(wallet.utxos))
    cluster_coins.set(wallet.balance.coins)
    cluster_rewards.set(wallet.rewards)
