"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from depco_simulator.api.middleware import RequestIDMiddleware, MetricsMiddleware
from depco_simulator.api.v1 import accounts, portfolio, scenarios, scores, simulate
from depco_simulator.config import settings
from depco_simulator.infrastructure.observability.logging import setup_logging
from depco_simulator.session import SessionStore

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="DEPCO Credit Simulator",
        description="Portfolio DTI, what-if scenarios and score-impact estimates",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.sessions = SessionStore(max_sessions=settings.session_max_entries)

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(portfolio.router, prefix="/v1", tags=["portfolio"])
    app.include_router(accounts.router, prefix="/v1", tags=["external-accounts"])
    app.include_router(simulate.router, prefix="/v1", tags=["simulation"])
    app.include_router(scenarios.router, prefix="/v1", tags=["scenarios"])
    app.include_router(scores.router, prefix="/v1", tags=["scores"])

    return app


app = create_app()
