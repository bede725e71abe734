# api/main.py

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from analytics.tokens import configure_tokens
from common.logging_setup import log_with_context, setup_logging
from common.settings import Settings, load_settings
from storage.manager import StorageManager, storage_from_settings

from .responses import install_error_handlers
from .routers import addresses, analytics, blocks, explorer, tokens, transfers

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


def create_app(settings: Optional[Settings] = None, store: Optional[StorageManager] = None) -> FastAPI:
    """
    Build the API. Without arguments settings come from config.yaml and env,
    and the store is opened (and migrated) on startup.
    """
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.log_level)
        configure_tokens(settings.tokens)
        owned = store is None
        app.state.store = store or storage_from_settings(settings)
        if settings.api.migrate_on_start:
            app.state.store.setup()
        log_with_context(logger, logging.INFO, "API startup completed",
                         driver=settings.db.driver, demo=settings.demo.enabled)

        yield

        logger.info("API shutting down")
        if owned:
            app.state.store.close()

    app = FastAPI(
        title="Transfer Indexer API",
        description="REST API over indexed ERC-20 transfer events",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=False,
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    install_error_handlers(app)

    for module in (transfers, addresses, tokens, blocks, explorer, analytics):
        app.include_router(module.router, prefix="/api", tags=[module.__name__.rsplit(".", 1)[-1]])

    @app.get("/health")
    def health_check():
        return {
            "status": "healthy",
            "message": "Indexer API is running",
            "database_connected": app.state.store is not None,
        }

    @app.get("/")
    def root():
        """Root endpoint"""
        return {
            "message": "Transfer Indexer API",
            "version": VERSION,
            "endpoints": {
                "health": "/health",
                "transfers": "/api/transfers/{address}",
                "addresses": "/api/addresses/{address}",
                "tokens": "/api/tokens/{tokenAddress}/transfers",
                "blocks": "/api/blocks",
                "explorer": "/api/explorer/stats",
                "analytics": "/api/analytics/overview",
                "docs": "/docs",
            },
        }

    return app
