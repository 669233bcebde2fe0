"""FastAPI application entry point"""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tokenledger import __version__
from tokenledger.api import health, tokens
from tokenledger.config import StoreConfig, resolve_store_config, settings
from tokenledger.hooks import TokenLifecycleHooks
from tokenledger.store import TokenStore
from tokenledger.utils.logger import logger, setup_logging

# Setup logging
setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)


def create_app(store_config: Optional[StoreConfig] = None) -> FastAPI:
    """Build the application.

    Args:
        store_config: Explicit backend configuration. When omitted, it is
            resolved from settings at startup and a missing DATABASE_URL
            aborts startup with ConfigurationError.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler"""
        # Startup
        config = store_config or resolve_store_config(settings)
        store = TokenStore(config)
        app.state.store = store
        app.state.hooks = TokenLifecycleHooks(store)

        logger.info("tokenledger starting up", extra={
            "version": __version__,
            "table": config.table_name,
            "schema": config.schema,
            "log_level": settings.LOG_LEVEL,
        })
        yield
        # Shutdown
        logger.info("tokenledger shutting down")

    app = FastAPI(
        title="tokenledger",
        description="Revocable tokens backed by a database record per token",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(health.router)
    app.include_router(tokens.router)

    @app.get("/")
    def root():
        """Root endpoint"""
        return {
            "service": "tokenledger",
            "version": __version__,
            "status": "operational",
            "docs": "/docs",
            "health": "/health",
        }

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler for uncaught errors"""
        logger.error(
            f"Unhandled exception: {str(exc)}",
            extra={
                "path": request.url.path,
                "method": request.method
            },
            exc_info=True
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": getattr(exc, "code", "internal_server_error"),
                "message": "An unexpected error occurred."
            }
        )

    return app


app = create_app()
