"""Main API router."""

from fastapi import APIRouter
from lineagedesk.api.options import router as options_router
from lineagedesk.api.models import router as models_router
from lineagedesk.api.lineage import router as lineage_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(options_router)
api_router.include_router(models_router)
api_router.include_router(lineage_router)
