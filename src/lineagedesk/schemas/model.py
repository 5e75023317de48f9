"""Pydantic schemas for models and catalog options."""

from pydantic import BaseModel, Field


class OptionsResponse(BaseModel):
    layers: list[str]
    subjects: list[str]


class ModelCreate(BaseModel):
    model_name: str = Field(min_length=1)
    layer: str = Field(min_length=1)
    comment: str = ""
    subject: str = ""
    creator: str | None = None

    model_config = {"str_strip_whitespace": True, "protected_namespaces": ()}


class ModelResponse(BaseModel):
    row_index: int
    model_id: str
    model_name: str
    comment: str
    layer: str
    subject: str
    created_at: str
    updated_at: str
    creator: str
    status: str

    model_config = {"from_attributes": True, "protected_namespaces": ()}


class ModelListResponse(BaseModel):
    models: list[ModelResponse]
    total: int


class ModelCreateResponse(BaseModel):
    model_id: str
    model: ModelResponse

    model_config = {"protected_namespaces": ()}


class ModelDeleteResponse(BaseModel):
    model_id: str
    deleted_models: int
    deleted_lineages: int

    model_config = {"from_attributes": True, "protected_namespaces": ()}


class ModelSuggestion(BaseModel):
    model_name: str
    comment: str
    subject: str
    label: str

    model_config = {"protected_namespaces": ()}


class SuggestionListResponse(BaseModel):
    suggestions: list[ModelSuggestion]
