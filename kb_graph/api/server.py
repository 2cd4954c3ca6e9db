"""
Knowledge Graph API Server

FastAPI application exposing the knowledge-graph analytics.

Endpoints:
- GET /api/knowledge-graph/... - Graph views, analytics, categories, statistics
- GET /health - Liveness check
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..config.settings import Settings, configure_logging, settings as default_settings
from ..exceptions import (
    AnalysisCancelledError,
    AnalysisTimeoutError,
    ConflictError,
    CycleDetectedError,
    KnowledgeBaseException,
    NotFoundError,
    ValidationError,
)
from ..service import KnowledgeGraphService
from ..store.base import RecordStore
from ..store.memory import InMemoryRecordStore
from .routes import router as knowledge_graph_router

logger = logging.getLogger(__name__)

# Non-standard "client closed request"
CLIENT_CLOSED_REQUEST = 499

# Checked in order; ForbiddenError is a NotFoundError and shares its code.
STATUS_CODES = [
    (NotFoundError, 404),
    (ValidationError, 400),
    (ConflictError, 409),
    (CycleDetectedError, 409),
    (AnalysisTimeoutError, 503),
    (AnalysisCancelledError, CLIENT_CLOSED_REQUEST),
]


def status_code_for(exc: KnowledgeBaseException) -> int:
    for exc_type, status_code in STATUS_CODES:
        if isinstance(exc, exc_type):
            return status_code
    return 500


def load_store(config: Settings) -> RecordStore:
    """In-memory store seeded from KB_DATA_FILE when one is configured."""
    if config.store.data_file:
        logger.info(f"Loading records from {config.store.data_file}")
        return InMemoryRecordStore.load_json(config.store.data_file)
    return InMemoryRecordStore()


# =============================================================================
# APPLICATION
# =============================================================================

def create_app(
    store: RecordStore = None,
    service: KnowledgeGraphService = None,
    settings: Settings = None
) -> FastAPI:
    """Create the FastAPI application."""
    settings = settings or default_settings
    configure_logging(settings.logging)

    if service is None:
        service = KnowledgeGraphService(store or load_store(settings), config=settings.analytics)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        logger.info("Shutting down analysis executor")
        service.close()

    app = FastAPI(
        title="Knowledge Graph Analytics API",
        description="Graph views and analytics over a personal knowledge base",
        version="1.0.0",
        lifespan=lifespan
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # State
    app.state.service = service

    @app.exception_handler(KnowledgeBaseException)
    async def knowledge_base_error(request: Request, exc: KnowledgeBaseException):
        status_code = status_code_for(exc)
        if status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=status_code, content=exc.to_dict())

    @app.get("/health")
    async def health():
        """Health check."""
        return {
            "status": "healthy",
            "timestamp": datetime.now().isoformat(),
            "max_workers": service.config.max_workers
        }

    app.include_router(knowledge_graph_router)

    return app


# =============================================================================
# MAIN
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    app = create_app()
    uvicorn.run(app, host=default_settings.api.host, port=default_settings.api.port)
