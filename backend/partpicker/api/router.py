"""API router -- aggregates all endpoint routers."""

from fastapi import APIRouter

from partpicker.api import builds, components, cron, cross_site, health, products, stored

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(products.router, tags=["products"])
api_router.include_router(components.router, tags=["components"])
api_router.include_router(cross_site.router, tags=["cross-site"])
api_router.include_router(builds.router, tags=["builds"])
api_router.include_router(stored.router, tags=["stored"])
api_router.include_router(cron.router, prefix="/cron", tags=["cron"])
