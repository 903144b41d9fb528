import time
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .api.v1 import errors
from .api.v1 import router as api_v1_router
from .core.config import settings
from .core.errors import PromptError
from .core.logger import get_logger, setup_logging
from .database import create_db_engine, create_session_factory, init_db
from .services import PromptEngine

# Initialize logger
logger = get_logger(__name__)


def create_app(database_url: Optional[str] = None, configure_logging: bool = True) -> FastAPI:
    """Build the API application bound to one database.

    Tables are created and default environments seeded on startup.
    """
    db_engine = create_db_engine(database_url)
    prompt_engine = PromptEngine(create_session_factory(db_engine))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan context manager."""
        # Startup
        if configure_logging:
            setup_logging()
        logger.info("Starting Prompt Release Service...")
        logger.info(f"Log level: {settings.LOG_LEVEL}")
        logger.info(f"Database URL: {db_engine.url.render_as_string(hide_password=True)}")
        init_db(db_engine)
        prompt_engine.seed_environments()

        yield

        # Shutdown
        logger.info("Shutting down Prompt Release Service...")
        db_engine.dispose()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="API for versioning prompt templates and releasing them to environments.",
        version=__version__,
        lifespan=lifespan,
        openapi_tags=[
            {
                "name": "Prompts",
                "description": "Prompts, their versions, diffs, rendering and bundles."
            },
            {
                "name": "Publications",
                "description": "Releasing versions to environments and reading what is active."
            },
            {
                "name": "Environments",
                "description": "Deployment environments."
            },
        ],
        swagger_ui_parameters={
            "syntaxHighlight.theme": "obsidian",
            "displayRequestDuration": True,
            "filter": True,
        },
    )
    app.state.engine = prompt_engine

    # CORS Middleware
    if settings.BACKEND_CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[str(origin) for origin in settings.BACKEND_CORS_ORIGINS],
            allow_credentials=True,
            allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
            allow_headers=["*"],
        )

    # Exception handlers
    app.add_exception_handler(PromptError, errors.http_error_handler)
    app.add_exception_handler(RequestValidationError, errors.validation_error_handler)
    app.add_exception_handler(Exception, errors.unhandled_exception_handler)

    app.include_router(api_v1_router, prefix=settings.API_V1_STR)

    # Middleware for request logging
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Middleware to log all incoming requests and their responses."""
        start_time = time.time()

        logger.info(f"Request: {request.method} {request.url}")

        response = await call_next(request)

        process_time = round((time.time() - start_time) * 1000, 2)
        logger.info(
            f"Response: {request.method} {request.url} "
            f"Status: {response.status_code} "
            f"Time: {process_time}ms"
        )

        response.headers["X-Process-Time"] = str(process_time)
        return response

    # Health check endpoint
    @app.get("/health", status_code=status.HTTP_200_OK)
    async def health_check() -> dict:
        """Health check endpoint"""
        return {
            "status": "ok",
            "service": "prompt-release-service",
            "version": __version__,
        }

    return app


app = create_app()

# For development with auto-reload
if __name__ == "__main__":
    uvicorn.run(
        "prompt_release.app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        workers=1
    )
