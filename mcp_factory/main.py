import logging
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from mcp_factory.core.config import settings
from mcp_factory.core.logging import configure_logging
from mcp_factory.core.services import Services, build_services
from mcp_factory.api.routes import router as api_router

log = logging.getLogger(__name__)


def create_app(services: Optional[Services] = None) -> FastAPI:
    if services is None:
        configure_logging()
        services = build_services(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup and shutdown events."""
        # Startup
        log.info("Starting API server...")
        try:
            services.init()
            log.info("API server startup complete")
        except Exception as e:
            log.error("API startup failed: %s", e, exc_info=True)
            raise
        yield
        # Shutdown
        log.info("Shutting down API server...")
        await services.engine.shutdown()

    app = FastAPI(
        title=services.settings.app_name,
        version="0.1.0",
        lifespan=lifespan
    )
    app.state.services = services
    app.include_router(api_router, prefix="/api")

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        log.error("Unhandled error on %s: %s", request.url.path, exc, exc_info=exc)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    return app

