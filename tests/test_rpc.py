import logging
import pytest
from fastapi.testclient import TestClient
from stakecluster.rpc import api
from stakecluster.explorer.memory import ChainFixture, InMemoryDataSource
from stakecluster.protocol.crypto.addresses import resolve_staking_credential
from stakecluster.protocol.types.common import ProviderUnavailable
from stakecluster.protocol.types.ledger import RewardAccountInfo, Transaction

@pytest.fixture
def chain(make_address, make_utxo):
    s = make_address(payment=1, stake=9)
    t = make_address(payment=2, stake=9)
    k1 = resolve_staking_credential(s, 0)
    fixture = ChainFixture(
        utxos=[make_utxo(s, "aa" * 32, 0, coins=600), make_utxo(t, "bb" * 32, 0, coins=400)],
        reward_accounts=[RewardAccountInfo(staking_credential=k1, rewards=50, staked_amount=1000, pool_id="P1")],
        transactions={s: [Transaction(tx_hash="aa" * 32, index=0, block_height=7)]},
    )
    return {"s": s, "t": t, "k1": k1, "source": InMemoryDataSource(fixture)}

@pytest.fixture
def client(chain, monkeypatch):
    monkeypatch.setattr(api, "data_source", chain["source"])
    return TestClient(api.app)

def test_status(client):
    resp = client.get("/status")

    assert resp.status_code == 200
    assert resp.json() == {"network_id": 0, "data_source": "InMemoryDataSource"}

def test_not_initialized(monkeypatch):
    monkeypatch.setattr(api, "data_source", None)

    resp = TestClient(api.app).get("/status")

    assert resp.status_code == 503

def test_cluster(client, chain):
    resp = client.get(f"/cluster/{chain['s']}")

    assert resp.status_code == 200
    data = resp.json()
    assert {a["address"] for a in data["addresses"]} == {chain["s"], chain["t"]}
    assert data["balance"]["coins"] == 1000
    assert data["rewards"] == 50
    assert data["total_value"] == 1050
    assert data["delegation"][0]["pool_id"] == "P1"
    assert data["delegation"][0]["staking_credential"] == chain["k1"]

def test_cluster_malformed_address(client):
    resp = client.get("/cluster/addr_test1garbage")

    assert resp.status_code == 400
    assert "Malformed address" in resp.json()["detail"]

def test_cluster_provider_unavailable(client, chain, monkeypatch):
    def refuse(address):
        raise ProviderUnavailable("Invalid project token.")
    monkeypatch.setattr(chain["source"], "reward_accounts_for", refuse)

    resp = client.get(f"/cluster/{chain['s']}")

    assert resp.status_code == 503

def test_cluster_discovery_failed(client, chain, monkeypatch):
    def explode(credential):
        raise RuntimeError("boom")
    monkeypatch.setattr(chain["source"], "addresses_for", explode)

    resp = client.get(f"/cluster/{chain['s']}")

    assert resp.status_code == 502

def test_transactions(client, chain):
    resp = client.get(f"/address/{chain['s']}/transactions")

    assert resp.status_code == 200
    assert resp.json()["transactions"][0]["block_height"] == 7

def test_metrics(client, chain):
    client.get(f"/cluster/{chain['s']}")

    resp = client.get("/metrics")

    assert resp.status_code == 200
    assert "stakecluster_discovery_runs_total" in resp.text
    assert "stakecluster_cluster_addresses 2.0" in resp.text

def test_cluster_progress_is_logged(client, chain, caplog):
    caplog.set_level(logging.DEBUG, logger="stakecluster.rpc.api")

    client.get(f"/cluster/{chain['s']}")

    assert f"Starting cluster discovery from seed {chain['s']}." in caplog.text
    assert "Cluster discovery complete." in caplog.text

def test_cluster_reward_address_is_rejected(client, make_address):
    resp = client.get(f"/cluster/{make_address(stake=9)}")

    assert resp.status_code == 400
    assert "reward addresses cannot seed a cluster" in resp.json()["detail"]
