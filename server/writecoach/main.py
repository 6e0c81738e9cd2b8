"""
WriteCoach FastAPI Application

Web server for translation analysis and topic generation, backed by a
multi-provider failover core with circuit breakers, response caching and
temporary user blocks.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn
from loguru import logger

from .shared.core.config import Settings
from .shared.core.connection_manager import ConnectionManager
from .shared.core.dependencies import get_settings
from .shared.core.initializer import Initializer
from .shared.core.logging import configure_logging
from .shared.middleware import add_monitoring_middleware
from .shared.services.endpoint import EndpointFactory
from .shared.services.rate_limit import ClientRateLimiter
from .shared.api import certificates, health
from .web_api import router as web_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Initialize resources at startup, cleanup at shutdown.

    - Connection pools and the provider chain are created once at startup
    - Stored in app.state for access by dependencies
    - Circuit, cache and block state lives only in the store
    """
    settings: Settings = app.state.settings
    configure_logging(settings.log_level, settings.log_file, settings.log_format)
    logger.info(f"Starting {settings.app_name} Web Server...")

    conn_manager = ConnectionManager(settings)
    await conn_manager.initialize()
    app.state.connection_manager = conn_manager

    initializer = Initializer(settings.provider_config_file, settings.certificates_file)
    await initializer.initialize()
    app.state.initializer = initializer

    http_client = await conn_manager.get_http_client()
    factory = EndpointFactory(settings, http_client)
    app.state.provider_chain = factory.build_chain(initializer.get_provider_models())

    if settings.rate_limit_enabled:
        app.state.rate_limiter = ClientRateLimiter(
            storage_uri=settings.get_rate_limit_storage_uri(),
            main_limit=settings.rate_limit_main,
            burst_limit=settings.rate_limit_burst,
        )
    else:
        app.state.rate_limiter = None
        logger.warning("Rate limiting is disabled")

    logger.info(f"Web Server started successfully (store backend: {settings.store_backend})")

    yield

    logger.info("Shutting down Web Server...")
    if hasattr(app.state, 'connection_manager'):
        await app.state.connection_manager.close()
        logger.info("Connection manager closed")
    logger.info("Web Server shut down gracefully")


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed submissions as 400 with one readable message."""
    errors = [
        {"field": ".".join(str(part) for part in error["loc"] if part != "body"), "message": error["msg"]}
        for error in exc.errors()
    ]
    message = errors[0]["message"] if errors else "Invalid request"
    logger.info(f"Rejected invalid request to {request.url.path}: {message}")
    return JSONResponse(
        status_code=400,
        content={"detail": {"error": "invalid_request", "message": message, "errors": errors}},
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application. Passing settings overrides the environment."""
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="AI writing coach with multi-provider failover",
        version=settings.version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )
    app.state.settings = settings
    app.dependency_overrides[get_settings] = lambda: settings

    add_monitoring_middleware(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-AI-Provider", "X-Cache", "Retry-After"],
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    app.include_router(web_router.router, prefix="/api", tags=["web-api"])
    app.include_router(certificates.router, prefix="/api", tags=["certificates"])
    app.include_router(health.router, prefix="/api", tags=["health"])

    @app.get("/")
    async def root():
        """Service information."""
        return {
            "service": settings.app_name,
            "version": settings.version,
            "status": "operational",
            "endpoints": {
                "analyze": "/api/analyze",
                "generate_topic": "/api/generate-topic",
                "certificates": "/api/certificates",
                "user_counter": "/api/user-counter",
                "health": "/api/health",
                "metrics": "/metrics",
                "docs": "/docs",
            },
        }

    return app


app = create_app()


def main():
    """
    Main entry point for running the web server.
    With the redis store backend any number of workers can share state.
    """
    settings = get_settings()

    logger.info(f"Starting Web Server on {settings.host}:{settings.port}")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Workers: {settings.workers}")

    if settings.workers > 1 and settings.uses_memory_store():
        logger.warning("Memory store with several workers: circuit and block state will not be shared")

    uvicorn.run(
        "writecoach.main:app",
        host=settings.host,
        port=settings.port,
        workers=settings.workers,
        log_level=settings.log_level.lower(),
        access_log=True,
        loop="asyncio",
    )


if __name__ == "__main__":
    main()
