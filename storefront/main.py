"""
==============================================================================
Storefront Catalog & Cart Service - Application Entry Point
==============================================================================

FastAPI application with:
- Admin product catalog (filter, sort, stats, create/edit, visibility)
- Public storefront listing
- In-memory session carts
- Cloudinary or local-filesystem image uploads

Usage:
------
    # Development
    uvicorn storefront.main:app --reload

    # Production
    uvicorn storefront.main:app --host 0.0.0.0 --port 8000

==============================================================================
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles

from storefront.api.router import api_router
from storefront.cart.cart import CartRegistry
from storefront.catalog.repository import ProductRepository
from storefront.config import Settings, get_settings
from storefront.core.exceptions import register_exception_handlers
from storefront.db.catalog_store import SqlCatalogStore
from storefront.db.database import DatabaseManager
from storefront.db.init_db import CatalogInitializer
from storefront.storage.blob_store import BlobStore, CloudinaryBlobStore, LocalBlobStore


# ============================================================================
# LOGGING SETUP
# ============================================================================

settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)

logger = logging.getLogger(__name__)


def build_blob_store(settings: Settings) -> BlobStore:
    """Create the Blob Store selected by ``blob_backend``."""
    if settings.blob_backend == "cloudinary":
        return CloudinaryBlobStore(
            settings.cloudinary_upload_url,
            settings.cloudinary_upload_preset,
            timeout=settings.upload_timeout_seconds,
        )
    return LocalBlobStore(settings.media_path, settings.media_url)


# ============================================================================
# APPLICATION FACTORY
# ============================================================================

class Application:
    """
    FastAPI application factory and manager.

    Handles application lifecycle including:
    - Startup and shutdown events
    - Middleware configuration
    - Router registration
    - Exception handler setup

    The stores, repository and cart registry are created at startup and
    published on ``app.state`` for the request dependencies.
    """

    def __init__(self):
        """Initialize the application."""
        self._settings = get_settings()
        self._db_manager = None
        self._app = self._create_app()

    def _create_app(self) -> FastAPI:
        """Create and configure the FastAPI application."""
        app = FastAPI(
            title=self._settings.app_name,
            version="1.0.0",
            description="Product catalog, storefront and cart service",
            lifespan=self._lifespan,
            docs_url="/docs",
            redoc_url="/redoc",
        )

        # Configure middleware
        self._configure_middleware(app)

        # Register exception handlers
        register_exception_handlers(app)

        # Register routers
        app.include_router(api_router)

        # Serve files written by the local blob store
        app.mount(
            self._settings.media_url,
            StaticFiles(directory=self._settings.media_directory, check_dir=False),
            name="media"
        )

        # Register root endpoint
        self._register_root(app)

        return app

    @asynccontextmanager
    async def _lifespan(self, app: FastAPI):
        """Application lifespan manager."""
        # Startup
        self._startup(app)
        yield
        # Shutdown
        self._shutdown()

    def _startup(self, app: FastAPI) -> None:
        """Application startup tasks."""
        logger.info("=" * 60)
        logger.info(f"🚀 Starting {self._settings.app_name}")
        logger.info("=" * 60)

        self._settings.ensure_directories()

        # Catalog Store
        self._db_manager = DatabaseManager(self._settings.database_url)
        CatalogInitializer(self._db_manager).initialize(seed=self._settings.seed_demo_data)
        catalog_store = SqlCatalogStore(self._db_manager)

        app.state.catalog_store = catalog_store
        app.state.repository = ProductRepository(catalog_store)
        app.state.blob_store = build_blob_store(self._settings)
        app.state.carts = CartRegistry()

        logger.info(f"🖼️ Blob store: {self._settings.blob_backend}")
        logger.info("=" * 60)
        logger.info(f"✅ {self._settings.app_name} ready")
        logger.info(f"📍 Running on http://{self._settings.host}:{self._settings.port}")
        logger.info(f"📖 API Docs: http://{self._settings.host}:{self._settings.port}/docs")
        logger.info("=" * 60)

    def _shutdown(self) -> None:
        """Application shutdown tasks."""
        logger.info("🛑 Shutting down...")
        if self._db_manager is not None:
            self._db_manager.dispose()
            self._db_manager = None
        logger.info("✅ Shutdown complete")

    def _configure_middleware(self, app: FastAPI) -> None:
        """Configure application middleware."""
        app.add_middleware(
            CORSMiddleware,
            allow_origins=self._settings.cors_origins_list,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    def _register_root(self, app: FastAPI) -> None:
        """Register root endpoint."""

        @app.get("/", include_in_schema=False)
        async def root():
            """Redirect to the API documentation."""
            return RedirectResponse(url="/docs")

    @property
    def app(self) -> FastAPI:
        """Get the FastAPI application instance."""
        return self._app


# ============================================================================
# APPLICATION INSTANCE
# ============================================================================

# Create application instance
application = Application()
app = application.app


# ============================================================================
# ENTRY POINT
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "storefront.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info"
    )
