"""Cash Flow Projection API: main entry point."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cashflow.config import settings
from cashflow.core.exceptions import CashFlowError
from cashflow.core.logging import configure_logging
from cashflow.core.middleware import RequestLoggingMiddleware

logger = structlog.get_logger()

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown events."""
    # Startup
    configure_logging(settings.log_level, settings.log_json)
    logger.info("Starting Cash Flow Projection API", env=settings.app_env)
    yield
    # Shutdown
    logger.info("Shutting down Cash Flow Projection API")


app = FastAPI(
    title="Cash Flow Projection API",
    description="Month-by-month cash flow projection, liquidity and runway analysis",
    version=VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    redirect_slashes=False,
)

# ── Middleware ─────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)


# ── Errors ────────────────────────────────────────
@app.exception_handler(CashFlowError)
async def cash_flow_error_handler(request: Request, exc: CashFlowError):
    logger.warning(
        "cash_flow_error",
        error=type(exc).__name__,
        detail=exc.detail,
        path=request.url.path,
    )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


# ── Health Check ──────────────────────────────────
@app.get("/health", tags=["system"])
async def health_check():
    """Liveness probe: always returns healthy if the process is running."""
    return {"status": "healthy", "version": VERSION}


@app.get("/ready", tags=["system"])
async def readiness_check():
    """Readiness probe: the engine is stateless, only the configuration is checked."""
    checks = {"api": "ok", "config": "ok"}
    if settings.default_months_ahead > settings.max_months_ahead:
        checks["config"] = "error: default_months_ahead exceeds max_months_ahead"
        return {"status": "degraded", "checks": checks}

    return {"status": "ready", "checks": checks}


# ── API Routes ────────────────────────────────────
from cashflow.api.v1 import cash_flow  # noqa: E402

app.include_router(cash_flow.router, prefix="/api/v1/cash-flow", tags=["cash-flow"])
