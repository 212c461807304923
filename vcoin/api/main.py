"""FastAPI application factory"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from vcoin.api.middleware import RequestIDMiddleware, MetricsMiddleware
from vcoin.api.v1 import auth, investments, students
from vcoin.domain.throttle import LoginThrottle
from vcoin.infrastructure.observability.logging import setup_logging
from vcoin.config import settings

# Setup structured logging
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Run the throttle sweep for the lifetime of the server"""
    app.state.login_throttle.start()
    try:
        yield
    finally:
        await app.state.login_throttle.stop()


def create_app(login_throttle: LoginThrottle | None = None) -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="VCOIN API",
        description="Compound interest simulator for classroom investments",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.login_throttle = login_throttle or LoginThrottle.from_settings(settings)

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        stats = app.state.login_throttle.get_stats()
        return {
            "status": "ok",
            "service": settings.service_name,
            "login_throttle": {
                "tracked": stats.total_tracked,
                "oldest_age_ms": stats.oldest_age_ms,
                "memory_usage_percent": stats.memory_usage_percent,
                "near_capacity": stats.is_near_capacity,
            },
        }

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(auth.router, prefix="/v1", tags=["auth"])
    app.include_router(students.router, prefix="/v1", tags=["students"])
    app.include_router(investments.router, prefix="/v1", tags=["investments"])

    return app


app = create_app()
