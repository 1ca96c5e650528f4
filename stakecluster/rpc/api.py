# MIT License
# Copyright (c) 2025 Hashborn

from fastapi import FastAPI, HTTPException
from fastapi.responses import Response
from typing import Optional
from ..cluster.discovery import LoggingProgressMonitor, discover
from ..explorer.data_source import BlockchainDataSource
from ..protocol.types.common import MalformedAddress, ProviderUnavailable, DiscoveryFailed
from ..protocol.crypto.addresses import decode_address
import logging

logger = logging.getLogger(__name__)

app = FastAPI(title="stakecluster RPC")

data_source: Optional[BlockchainDataSource] = None
discovery_timeout: Optional[float] = None

def _require_source() -> BlockchainDataSource:
    if data_source is None:
        raise HTTPException(status_code=503, detail="Data source not initialized")
    return data_source

@app.get("/status")
async def get_status():
    source = _require_source()
    return {
        "network_id": source.network_id(),
        "data_source": type(source).__name__
    }

@app.get("/cluster/{address}")
def get_cluster(address: str):
    """
    Discover the clustered wallet around an address.

    Runs synchronously in the threadpool; a discovery may take many provider round trips.
    """
    source = _require_source()
    try:
        wallet = discover(address, source, LoggingProgressMonitor(logger, logging.DEBUG), timeout=discovery_timeout)
    except MalformedAddress as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ProviderUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))
    except DiscoveryFailed as e:
        logger.error(f"Discovery failed for {address}: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    response = wallet.model_dump(mode="json")
    response["total_value"] = wallet.total_value
    response["delegation"] = [share.model_dump(mode="json") for share in wallet.delegation_state()]
    return response

@app.get("/address/{address}/transactions")
def get_transactions(address: str):
    source = _require_source()
    try:
        decode_address(address)
    except MalformedAddress as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        txs = source.transactions_for(address)
    except ProviderUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))
    return {"address": address, "transactions": [tx.model_dump() for tx in txs]}

@app.get("/metrics")
async def get_metrics():
    """
    Prometheus metrics endpoint.

    Returns metrics in Prometheus text format.
    """
    try:
        from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
        from ..observability.metrics import metrics_registry

        return Response(
            content=generate_latest(metrics_registry),
            media_type=CONTENT_TYPE_LATEST
        )
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Metrics error: {str(e)}")

def start_rpc_server(source: BlockchainDataSource, host: str = "0.0.0.0", port: int = 8000, timeout: Optional[float] = None):
    global data_source, discovery_timeout
    data_source = source
    discovery_timeout = timeout
    import uvicorn
    uvicorn.run(app, host=host, port=port)
