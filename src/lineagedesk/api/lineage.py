"""Lineage API endpoints."""

from fastapi import APIRouter, Depends

from lineagedesk.api.deps import get_catalog
from lineagedesk.core.auth import verify_api_key
from lineagedesk.schemas.lineage import (
    LineageCheckResponse, LineageCreate, LineageCreateResponse, LineageEndpoints,
    LineageResponse,
)
from lineagedesk.services.catalog_service import CatalogService

router = APIRouter(prefix="/lineage", tags=["lineage"])


@router.post("", response_model=LineageCreateResponse)
async def add_lineage(
    data: LineageCreate,
    catalog: CatalogService = Depends(get_catalog),
    _: str = Depends(verify_api_key),
):
    """Record that a scheduled task reads the source model and writes the target."""
    result = await catalog.add_lineage(
        source_layer=data.source_layer,
        source_model=data.source_model,
        target_layer=data.target_layer,
        target_model=data.target_model,
        task_name=data.task_name,
        task_location=data.task_location,
        schedule_name=data.schedule_name,
        schedule_location=data.schedule_location,
        remarks=data.remarks,
        creator=data.creator,
    )
    return LineageCreateResponse.model_validate(result)


@router.post("/check", response_model=LineageCheckResponse)
async def check_lineage(
    data: LineageEndpoints,
    catalog: CatalogService = Depends(get_catalog),
    _: str = Depends(verify_api_key),
):
    """Confirm both models and the relation between them exist."""
    result = await catalog.check_lineage(
        data.source_layer, data.source_model,
        data.target_layer, data.target_model,
    )
    return LineageCheckResponse.model_validate(result)


@router.delete("", response_model=LineageResponse)
async def delete_lineage(
    data: LineageEndpoints,
    catalog: CatalogService = Depends(get_catalog),
    _: str = Depends(verify_api_key),
):
    """Delete the relation between two models."""
    lineage = await catalog.delete_lineage(
        data.source_layer, data.source_model,
        data.target_layer, data.target_model,
    )
    return LineageResponse.model_validate(lineage)
