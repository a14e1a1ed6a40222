"""FastAPI server for the DentalHub Head Brain.

Run with:
    uvicorn dental_hub.server:app --reload --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from dental_hub import config
from dental_hub.api.routes import router
from dental_hub.sdr.manager import CampaignManager
from dental_hub.services.knowledge import KnowledgeRetriever
from dental_hub.services.supabase_client import SupabaseClient

VERSION = "1.0.0"
SERVICE_NAME = "DentalHub Head Brain"

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI):
    """Own the shared resources: one Supabase connection pool, the knowledge
    retriever on top of it, and the in-memory SDR campaign manager."""
    supabase = SupabaseClient()
    application.state.knowledge = KnowledgeRetriever(supabase)
    application.state.campaigns = CampaignManager(config.OFFICE_NAME)
    logger.info("%s ready for %s", SERVICE_NAME, config.OFFICE_NAME)
    try:
        yield
    finally:
        await supabase.aclose()
        application.state.knowledge = None
        application.state.campaigns = None
        logger.info("Shared resources released")


async def request_id_middleware(request: Request, call_next) -> Response:
    """Tag the request (and its log lines) with ``X-Request-ID``, minting one if absent."""
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    request.state.request_id = request_id
    logger.info("[%s] %s %s", request_id, request.method, request.url.path)
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


def create_app() -> FastAPI:
    application = FastAPI(
        title=SERVICE_NAME,
        description=(
            "Practice-management consultant: KPI analysis, lab case triage "
            "and SDR campaign automation."
        ),
        version=VERSION,
        lifespan=lifespan,
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.middleware("http")(request_id_middleware)
    application.include_router(router, prefix="/api")

    @application.get("/")
    async def root():
        """Service info and pointers to the docs and health check."""
        return {
            "service": SERVICE_NAME,
            "version": VERSION,
            "docs": "/docs",
            "health": "/api/health",
        }

    return application


app = create_app()


if __name__ == "__main__":
    logger.info("Serving on %s:%d", config.SERVER_HOST, config.SERVER_PORT)
    uvicorn.run("dental_hub.server:app", host=config.SERVER_HOST, port=config.SERVER_PORT)
