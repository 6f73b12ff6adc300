"""
Paediatric Emergency Engines - FastAPI Application

Main application entry point with API endpoints for:
- Engine catalog browsing (with weight-based doses)
- Assessment evaluation and engine activation
- Checklist progress, dismissal and reactivation
- Handover summaries
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from datetime import datetime

from paeds_engines import __version__, config
from paeds_engines.core.engines import CATALOG_VERSION, all_engines
from paeds_engines.models.engines import HealthResponse
from paeds_engines.routes.engines import router as engines_router
from paeds_engines.utils import (
    EngineCoreError,
    get_logger,
    setup_logging,
)

logger = get_logger(__name__)

START_TIME = datetime.now()


# ---- Application Lifespan ----

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging on startup."""
    setup_logging(config.LOG_LEVEL, config.LOG_FILE)
    logger.info(f"Engine catalog {CATALOG_VERSION} loaded ({len(all_engines())} engines)")
    logger.info("API ready to accept requests")
    yield
    logger.info("Paediatric Emergency Engines API shut down.")


# ---- FastAPI Application ----

app = FastAPI(
    title="Paediatric Emergency Engines API",
    description="Trigger, sequence and track paediatric emergency protocols",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(engines_router)


# ---- Error Handling ----

@app.exception_handler(EngineCoreError)
async def engine_core_error_handler(request: Request, exc: EngineCoreError):
    logger.warning(f"{request.method} {request.url.path} failed: {exc.code} {exc.message}")
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


# ---- API Endpoints ----

def _health() -> HealthResponse:
    return HealthResponse(
        status="healthy",
        version=__version__,
        timestamp=datetime.now().isoformat(),
        uptime_seconds=(datetime.now() - START_TIME).total_seconds(),
        catalog_version=CATALOG_VERSION,
        engine_count=len(all_engines()),
    )


@app.get("/", response_model=HealthResponse, tags=["Health"])
async def root():
    """API root - health check."""
    return _health()


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    return _health()


# ---- Run with uvicorn ----
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.API_HOST, port=config.API_PORT)
