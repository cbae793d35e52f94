"""Leave Governance — FastAPI Application Factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from leavegov.balances.router import router as balances_router
from leavegov.common.exceptions import register_exception_handlers
from leavegov.common.rate_limit import limiter
from leavegov.config import settings
from leavegov.database import engine
from leavegov.routing.policy import get_approval_policy
from leavegov.routing.router import router as routing_router

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown events."""
    policy = get_approval_policy()
    logger.info(
        "Leave governance starting (environment=%s, approval_policy=%s)",
        settings.ENVIRONMENT, policy.name,
    )
    yield
    await engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    configure_logging()
    # Fail fast on a misconfigured APPROVAL_POLICY
    get_approval_policy()

    app = FastAPI(
        title="Leave Governance",
        description="Leave approval routing and balance ledger",
        version="1.0.0",
        docs_url="/api/docs" if settings.ENVIRONMENT != "production" else None,
        redoc_url="/api/redoc" if settings.ENVIRONMENT != "production" else None,
        lifespan=lifespan,
    )

    # Exception handlers (RFC 7807)
    register_exception_handlers(app)

    # Rate limiting (slowapi)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health check
    @app.get("/api/v1/health", tags=["system"])
    async def health_check():
        return {
            "status": "healthy",
            "version": "1.0.0",
            "environment": settings.ENVIRONMENT,
        }

    # Register routers
    app.include_router(
        routing_router, prefix="/api/v1/leave/approval-routing", tags=["approval-routing"],
    )
    app.include_router(
        balances_router, prefix="/api/v1/leave/balances", tags=["leave-balances"],
    )

    return app


app = create_app()
