"""Model API endpoints."""

from fastapi import APIRouter, Depends

from lineagedesk.api.deps import get_catalog
from lineagedesk.core.auth import verify_api_key
from lineagedesk.schemas.lineage import ModelLineageResponse
from lineagedesk.schemas.model import (
    ModelCreate, ModelCreateResponse, ModelDeleteResponse,
    ModelListResponse, ModelResponse, ModelSuggestion, SuggestionListResponse,
)
from lineagedesk.services.catalog_service import CatalogService

router = APIRouter(prefix="/models", tags=["models"])


@router.get("", response_model=ModelListResponse)
async def find_models(
    layer: str = "",
    name: str = "",
    catalog: CatalogService = Depends(get_catalog),
    _: str = Depends(verify_api_key),
):
    """Search models by exact layer and partial, case-insensitive name."""
    models = await catalog.find_models(layer, name.strip())
    return ModelListResponse(
        models=[ModelResponse.model_validate(m) for m in models],
        total=len(models),
    )


@router.get("/suggest", response_model=SuggestionListResponse)
async def suggest_models(
    layer: str = "",
    q: str = "",
    catalog: CatalogService = Depends(get_catalog),
    _: str = Depends(verify_api_key),
):
    """Autocomplete model names within a layer."""
    models = await catalog.suggest_models(layer, q)
    return SuggestionListResponse(suggestions=[
        ModelSuggestion(
            model_name=m.model_name,
            comment=m.comment,
            subject=m.subject,
            label=f"{m.model_name} ({m.comment})" if m.comment else m.model_name,
        )
        for m in models
    ])


@router.post("", response_model=ModelCreateResponse)
async def add_model(
    data: ModelCreate,
    catalog: CatalogService = Depends(get_catalog),
    _: str = Depends(verify_api_key),
):
    """Register a new model in a layer."""
    model = await catalog.add_model(
        model_name=data.model_name,
        layer=data.layer,
        comment=data.comment,
        subject=data.subject,
        creator=data.creator,
    )
    return ModelCreateResponse(model_id=model.model_id, model=ModelResponse.model_validate(model))


@router.delete("/{layer}/{name:path}", response_model=ModelDeleteResponse)
async def delete_model(
    layer: str,
    name: str,
    catalog: CatalogService = Depends(get_catalog),
    _: str = Depends(verify_api_key),
):
    """Delete a model and every lineage relation that references it."""
    result = await catalog.delete_model(layer, name)
    return ModelDeleteResponse.model_validate(result)


@router.get("/{layer}/{name:path}/lineage", response_model=ModelLineageResponse)
async def get_model_lineage(
    layer: str,
    name: str,
    catalog: CatalogService = Depends(get_catalog),
    _: str = Depends(verify_api_key),
):
    """Upstream and downstream relations of one model."""
    result = await catalog.model_lineage(layer, name)
    return ModelLineageResponse.model_validate(result)
