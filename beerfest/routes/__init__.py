from .beers import router as beers_router
from .sync import router as sync_router

__all__ = ["beers_router", "sync_router"]
