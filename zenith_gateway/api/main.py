"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from zenith_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from zenith_gateway.api.v1 import allocations, bank_accounts, recurrences, reports, settlements, transactions
from zenith_gateway.infrastructure.observability.logging import setup_logging
from zenith_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Zenith Financial Gateway",
        description="Payables/receivables, cost-center allocation, recurrence and settlement service",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(transactions.router, prefix="/v1", tags=["transactions"])
    app.include_router(allocations.router, prefix="/v1", tags=["allocations"])
    app.include_router(recurrences.router, prefix="/v1", tags=["recurrences"])
    app.include_router(settlements.router, prefix="/v1", tags=["settlements"])
    app.include_router(bank_accounts.router, prefix="/v1", tags=["bank-accounts"])
    app.include_router(reports.router, prefix="/v1", tags=["reports"])

    return app


app = create_app()
