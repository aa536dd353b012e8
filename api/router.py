"""API router for the resource runtime."""
from fastapi import APIRouter

from shared.config import config
from .resources.router import router as resources_router


def build_router(prefix: str = config.api_prefix) -> APIRouter:
    router = APIRouter(prefix=prefix)
    router.include_router(resources_router)
    return router
