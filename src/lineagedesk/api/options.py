"""Catalog option endpoints — layer and subject-domain names."""

from fastapi import APIRouter, Depends

from lineagedesk.api.deps import get_catalog
from lineagedesk.core.auth import verify_api_key
from lineagedesk.schemas.model import OptionsResponse
from lineagedesk.services.catalog_service import CatalogService

router = APIRouter(prefix="/options", tags=["options"])


@router.get("", response_model=OptionsResponse)
async def get_options(
    catalog: CatalogService = Depends(get_catalog),
    _: str = Depends(verify_api_key),
):
    """List active layers and subject domains from the config sheet."""
    options = await catalog.get_options()
    return OptionsResponse(layers=options.layers, subjects=options.subjects)
