"""Pydantic schemas for lineage relations."""

from pydantic import BaseModel, Field

from lineagedesk.schemas.model import ModelResponse


class LineageEndpoints(BaseModel):
    source_layer: str = Field(min_length=1)
    source_model: str = Field(min_length=1)
    target_layer: str = Field(min_length=1)
    target_model: str = Field(min_length=1)

    model_config = {"str_strip_whitespace": True}


class LineageCreate(LineageEndpoints):
    task_name: str = Field(min_length=1)
    task_location: str = Field(min_length=1)
    schedule_name: str = Field(min_length=1)
    schedule_location: str = Field(min_length=1)
    remarks: str = ""
    creator: str | None = None


class LineageResponse(BaseModel):
    row_index: int
    relation_id: str
    source_model_id: str
    target_model_id: str
    task_name: str
    task_location: str
    schedule_name: str
    schedule_location: str
    remarks: str
    created_at: str
    updated_at: str
    creator: str
    status: str

    model_config = {"from_attributes": True}


class LineageCreateResponse(BaseModel):
    relation_id: str
    source: str
    target: str

    model_config = {"from_attributes": True}


class LineageCheckResponse(BaseModel):
    lineage: LineageResponse
    source: ModelResponse
    target: ModelResponse

    model_config = {"from_attributes": True}


class ModelLineageResponse(BaseModel):
    model: ModelResponse
    upstream: list[LineageResponse]
    downstream: list[LineageResponse]

    model_config = {"from_attributes": True, "protected_namespaces": ()}
