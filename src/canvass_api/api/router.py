"""Root API router with /api/v1 prefix."""

from fastapi import APIRouter

from canvass_api.core.config import Settings


def create_router(settings: Settings) -> APIRouter:
    """Create the root API router with all sub-routers included.

    Args:
        settings: Application settings.

    Returns:
        Configured API router.
    """
    from canvass_api.api.v1.rankings import rankings_router
    from canvass_api.api.v1.visits import visits_router

    root_router = APIRouter(prefix=settings.api_v1_prefix)
    root_router.include_router(visits_router)
    root_router.include_router(rankings_router)

    return root_router
