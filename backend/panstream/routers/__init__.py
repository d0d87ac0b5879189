from .aggregate import router as aggregate_router
from .health import router as health_router

__all__ = [
    "aggregate_router",
    "health_router",
]
