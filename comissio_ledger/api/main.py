"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from comissio_ledger.api.errors import ERROR_RESPONSES, register_exception_handlers
from comissio_ledger.api.middleware import RequestIDMiddleware, MetricsMiddleware
from comissio_ledger.api.v1 import auth, dashboard, debtors, debts, exports, projects
from comissio_ledger.context import ContextRegistry
from comissio_ledger.infrastructure.clients.identity import IdentityClient
from comissio_ledger.infrastructure.observability.logging import setup_logging
from comissio_ledger.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app(identity: IdentityClient | None = None) -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Comissio Ledger",
        description="Back-office API for real-estate commission debts and installments",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Session lifecycle: contexts are torn down when their operator signs out
    app.state.identity = identity or IdentityClient()
    app.state.contexts = ContextRegistry()
    app.state.identity.subscribe(app.state.contexts.handle_session_event)

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers; exports first so /debts/export.csv is not read as a debt id
    app.include_router(auth.router, prefix="/v1", tags=["auth"], responses=ERROR_RESPONSES)
    app.include_router(dashboard.router, prefix="/v1", tags=["dashboard"], responses=ERROR_RESPONSES)
    app.include_router(debtors.router, prefix="/v1", tags=["debtors"], responses=ERROR_RESPONSES)
    app.include_router(projects.router, prefix="/v1", tags=["projects"], responses=ERROR_RESPONSES)
    app.include_router(exports.router, prefix="/v1", tags=["exports"], responses=ERROR_RESPONSES)
    app.include_router(debts.router, prefix="/v1", tags=["debts"], responses=ERROR_RESPONSES)

    return app


app = create_app()
