"""
==============================================================================
Health Check Endpoints
==============================================================================

System health status endpoints for monitoring and orchestration.

==============================================================================
"""

from fastapi import APIRouter, Depends

from storefront.config import Settings
from storefront.core.dependencies import get_catalog_store, get_settings_dep
from storefront.db.catalog_store import CatalogStore


router = APIRouter(prefix="/health", tags=["Health"])


class HealthController:
    """Controller for health check operations."""

    def __init__(self, store: CatalogStore, settings: Settings):
        self._store = store
        self._settings = settings

    async def check_catalog_store(self) -> str:
        """Check Catalog Store connectivity."""
        return "healthy" if await self._store.ping() else "unhealthy"

    async def get_health(self) -> dict:
        """Get full health status."""
        store_status = await self.check_catalog_store()

        overall = "healthy" if store_status == "healthy" else "degraded"

        return {
            "status": overall,
            "components": {
                "api": "healthy",
                "catalog_store": store_status,
                "blob_store": self._settings.blob_backend
            }
        }


@router.get("")
async def health_check(
    store: CatalogStore = Depends(get_catalog_store),
    settings: Settings = Depends(get_settings_dep)
):
    """
    Health check endpoint.

    Returns system status including API and Catalog Store.
    """
    controller = HealthController(store, settings)
    return await controller.get_health()


@router.get("/ready")
async def readiness_check():
    """Readiness check for container orchestration."""
    return {"ready": True}


@router.get("/live")
async def liveness_check():
    """Liveness check for container orchestration."""
    return {"alive": True}
