"""
StreamHub Live Feed: SSE Relay Server
=====================================

Relays the live updates of a StreamHub collection as server-sent events.
Each connection gets its own collection updater; the browser's pace of
reading the response is the consumer pace.

Endpoints:
- GET /api/v1/health
- GET /api/v1/collections/{network}/{site_id}/{article_id}/stream

Usage:
    uvicorn streamhub.api.server:app --reload
"""
import json
import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Callable, Optional

import httpx
from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse

from ..config import StreamHubConfig
from ..contracts.base import StreamHubError
from ..service import LiveFeedService, create_service
from .mapper import map_entity_to_dict

LOG = logging.getLogger(__name__)

ServiceFactory = Callable[[StreamHubConfig], LiveFeedService]


# =============================================================================
# INFRASTRUCTURE SETUP
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load configuration and open the shared HTTP connection pool."""
    config_path = os.environ.get("STREAMHUB_CONFIG")
    config = StreamHubConfig.load(Path(config_path)) if config_path else StreamHubConfig()
    config = config.from_env()
    logging.basicConfig(level=config.log_level_value)

    app.state.config = config
    app.state.http_client = httpx.AsyncClient()
    LOG.info("SSE relay started (high_water_mark=%d)", config.high_water_mark)

    yield

    LOG.info("Shutting down SSE relay.")
    await app.state.http_client.aclose()


app = FastAPI(
    title="StreamHub Live Feed",
    version="0.1.0",
    description="Server-sent event relay for live StreamHub collections",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)


def get_base_config(request: Request) -> StreamHubConfig:
    return request.app.state.config


def get_service_factory(request: Request) -> ServiceFactory:
    http_client = request.app.state.http_client

    def factory(config: StreamHubConfig) -> LiveFeedService:
        return create_service(config, http_client=http_client)

    return factory


# =============================================================================
# ENDPOINTS
# =============================================================================

@app.get("/api/v1/health")
async def health():
    return {"status": "ok"}


@app.get("/api/v1/collections/{network}/{site_id}/{article_id}/stream")
async def stream_collection(
    network: str,
    site_id: str,
    article_id: str,
    environment: Optional[str] = Query(None),
    base_config: StreamHubConfig = Depends(get_base_config),
    service_factory: ServiceFactory = Depends(get_service_factory),
):
    """
    Server-Sent Events (SSE) endpoint for one collection.

    One ``data:`` frame per delivered entity. On failure a single
    ``event: error`` frame is sent and the stream ends.
    """
    try:
        config = base_config.with_overrides(
            network=network,
            site_id=site_id,
            article_id=article_id,
            environment=environment,
        )
        LOG.info("Relaying collection %s", config.identity)
    except ValueError as e:
        raise HTTPException(400, detail=str(e))

    service = service_factory(config)

    async def event_generator():
        try:
            async for entity in service.updater:
                yield f"data: {json.dumps(map_entity_to_dict(entity))}\n\n"
        except StreamHubError as e:
            LOG.warning("Relay for %s/%s ended: %s", site_id, article_id, e)
            payload = {"code": e.code.name, "error": str(e)}
            yield f"event: error\ndata: {json.dumps(payload)}\n\n"
        finally:
            await service.aclose()

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
        }
    )
