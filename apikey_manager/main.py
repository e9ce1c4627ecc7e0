"""
API Key Manager - Application Entry Point

Wires one in-memory KeyStore into the key lifecycle usecases and
exposes them over HTTP. All state lives for the lifetime of the process.
"""

import logging
import sys
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import keys, status as status_api
from .config import Settings, settings as default_settings
from .core import KeyGenerator, KeyLister, KeyRevoker, KeyStore, KeyValidator

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("=" * 60)
        logger.info("%s v%s", settings.app_name, settings.app_version)
        logger.info("=" * 60)
        logger.info("Storage: in-memory only, keys are lost on restart")

        store = KeyStore()
        app.state.settings = settings
        app.state.key_store = store
        app.state.key_generator = KeyGenerator(store)
        app.state.key_validator = KeyValidator(store)
        app.state.key_lister = KeyLister(store)
        app.state.key_revoker = KeyRevoker(store)

        logger.info("Key Manager ready to accept connections")

        yield

        stats = store.get_stats(datetime.now(timezone.utc))
        logger.info(
            "Shutting down Key Manager (%d keys, %d usage records discarded)",
            stats["keys_total"], stats["usage_records"],
        )

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Issues, validates, lists and revokes API keys",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )

    app.include_router(keys.router, prefix="/keys", tags=["Keys"])
    app.include_router(status_api.router, tags=["Status"])

    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "version": settings.app_version,
        }

    return app


app = create_app()


def run() -> None:
    configure_logging(default_settings)
    logger.info("Binding to %s:%d", default_settings.host, default_settings.port)

    uvicorn.run(
        "apikey_manager.main:app",
        host=default_settings.host,
        port=default_settings.port,
        reload=default_settings.debug,
        log_level=default_settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
