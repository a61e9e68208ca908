from variantvault.api.collection import router as collection_router
from variantvault.api.health import router as health_router
from variantvault.api.variants import router as variants_router

__all__ = [
    "collection_router",
    "health_router",
    "variants_router",
]
