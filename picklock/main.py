"""
FastAPI Application Entry Point

This is the main application module that sets up the FastAPI app,
configures middleware, and includes all routers.
"""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from picklock.config import settings
from picklock.errors import PickLockError
from picklock.routers import analysis, health

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info(
        f"Starting {settings.app_name} (max_iterations={settings.max_iterations}, "
        f"workers_per_offset={settings.workers_per_offset})"
    )

    yield

    logger.info(f"{settings.app_name} stopped")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    # PickLock API

    Audits RSA public keys for structural weakness by trying to recover
    the private exponent from the public key alone:

    - **Weak crack**: Fermat factorization, succeeds when p and q are close
    - **Strong crack**: experimental concurrent safe-prime guessing

    A cracked key must be considered compromised and rotated.
    Responses carry the raw private exponent, not a structured key.
    """,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    openapi_url="/openapi.json" if settings.debug else None,
    lifespan=lifespan
)


# ============================================================================
# Middleware
# ============================================================================

if settings.debug:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.middleware("http")
async def add_request_timing(request: Request, call_next):
    """Add request timing header for monitoring."""
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)
    return response


# ============================================================================
# Exception Handlers
# ============================================================================

@app.exception_handler(PickLockError)
async def picklock_exception_handler(request: Request, exc: PickLockError):
    """Analysis errors that escaped a router are client errors."""
    logger.info(f"{type(exc).__name__} on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=400,
        content={"detail": str(exc), "reason": type(exc).__name__}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler.

    Returns generic error responses to prevent information leakage.
    Detailed errors are logged internally.
    """
    logger.exception(f"Unhandled exception: {exc}")

    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )


# ============================================================================
# Include Routers
# ============================================================================

# Key analysis endpoints
app.include_router(analysis.router)

# Health check and monitoring
app.include_router(health.router)


@app.get("/", tags=["root"])
async def root():
    """Returns basic service information."""
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "status": "running"
    }


# ============================================================================
# Development Server
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "picklock.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
