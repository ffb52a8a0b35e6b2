"""
Hyperliquid Correlation Data Service — FastAPI
==============================================
Serves the all-time daily-returns correlation matrix and the funding
yields table as JSON.

Usage (from project root):
    uvicorn src.hypercorr.services.data.main:app --host 0.0.0.0 --port 8000

or:
    python -m src.hypercorr.services.data.main
"""

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.hypercorr.core.cache import get_store
from src.hypercorr.core.config import load_settings
from src.hypercorr.core.logging_config import get_logger, setup_logging
from src.hypercorr.services.data.api.correlation import router as correlation_router
from src.hypercorr.services.data.api.health import router as health_router
from src.hypercorr.services.data.api.yields import router as yields_router
from src.hypercorr.services.data.responses import SafeJSONResponse

setup_logging(service="data-service")
logger = get_logger("data_service")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = load_settings()
    store = get_store()
    logger.info(
        "data_service_starting",
        api_url=settings.api_url,
        cache_backend=getattr(store, "backend", type(store).__name__),
        cache_key=settings.cache_key,
        max_concurrency=settings.max_concurrency,
    )
    yield
    logger.info("data_service_stopped")


app = FastAPI(
    title="Hyperliquid Correlation Service",
    description=(
        "Pairwise correlation of daily returns across active Hyperliquid "
        "perps, ranked by notional open interest, plus funding yields."
    ),
    version="1.0.0",
    lifespan=lifespan,
    default_response_class=SafeJSONResponse,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        o.strip()
        for o in os.getenv(
            "CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000"
        ).split(",")
        if o.strip()
    ],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

app.include_router(correlation_router, tags=["Correlation"])
app.include_router(yields_router, tags=["Yields"])
app.include_router(health_router, tags=["Health"])


@app.get("/api/info")
def api_info():
    """Service info and endpoint index."""
    return {
        "service": "hypercorr-data-service",
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs",
        "endpoints": {
            "correlation": "/corr",
            "refresh": "/corr/refresh",
            "yields": "/yields",
            "health": "/health",
        },
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=os.getenv("DATA_SERVICE_HOST", "0.0.0.0"),
        port=int(os.getenv("DATA_SERVICE_PORT", "8000")),
        log_level="info",
    )
