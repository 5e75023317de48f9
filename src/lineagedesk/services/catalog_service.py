"""Catalog service — model and lineage operations over the sheets.

Uniqueness and reference checks are linear scans over freshly fetched
rows. Nothing guards against another client writing in between.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from lineagedesk.connectors.base import SheetConnector
from lineagedesk.core.config import LineageDeskSettings
from lineagedesk.core.errors import (
    LineageExistsError,
    LineageNotFoundError,
    ModelExistsError,
    ModelNotFoundError,
    model_label,
)
from lineagedesk.repositories.config_repo import ConfigRepository
from lineagedesk.repositories.lineage_repo import LineageRepository
from lineagedesk.repositories.model_repo import ModelRepository
from lineagedesk.sheets.records import (
    CatalogOptions,
    LineageRecord,
    ModelRecord,
    make_model_id,
    make_relation_id,
    now_stamp,
)

logger = logging.getLogger("lineagedesk.catalog")


@dataclass
class DeleteModelResult:
    model_id: str
    deleted_models: int
    deleted_lineages: int


@dataclass
class AddLineageResult:
    relation_id: str
    source: str
    target: str


@dataclass
class LineageCheck:
    lineage: LineageRecord
    source: ModelRecord
    target: ModelRecord


@dataclass
class ModelLineage:
    model: ModelRecord
    upstream: list[LineageRecord]
    downstream: list[LineageRecord]


class CatalogService:
    def __init__(
        self,
        sheets: SheetConnector,
        config_sheet: str,
        models_sheet: str,
        lineage_sheet: str,
        active_status: str = "有效",
        layer_kind: str = "层级",
        subject_kind: str = "主题域",
        default_creator: str = "system",
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.active_status = active_status
        self.default_creator = default_creator
        self._clock = clock
        self.config = ConfigRepository(sheets, config_sheet, active_status, layer_kind, subject_kind)
        self.models = ModelRepository(sheets, models_sheet, active_status)
        self.lineage = LineageRepository(sheets, lineage_sheet, active_status)

    @classmethod
    def from_settings(cls, sheets: SheetConnector, settings: LineageDeskSettings) -> "CatalogService":
        return cls(
            sheets,
            config_sheet=settings.config_sheet,
            models_sheet=settings.models_sheet,
            lineage_sheet=settings.lineage_sheet,
            active_status=settings.active_status,
            layer_kind=settings.layer_kind,
            subject_kind=settings.subject_kind,
            default_creator=settings.default_creator,
        )

    # ─── Config ───

    async def get_options(self) -> CatalogOptions:
        return await self.config.load_options()

    # ─── Models ───

    async def find_models(self, layer: str = "", name: str = "") -> list[ModelRecord]:
        return await self.models.search(layer, name)

    async def find_model(self, layer: str, name: str) -> ModelRecord | None:
        return await self.models.get_exact(layer, name)

    async def suggest_models(self, layer: str, prefix: str) -> list[ModelRecord]:
        """Autocomplete feed for model-name inputs."""
        prefix = prefix.strip()
        if not layer or not prefix:
            return []
        return await self.models.search(layer, prefix)

    async def add_model(
        self,
        model_name: str,
        layer: str,
        comment: str = "",
        subject: str = "",
        creator: str | None = None,
    ) -> ModelRecord:
        if await self.models.get_exact(layer, model_name):
            raise ModelExistsError(layer, model_name)

        model = ModelRecord(
            model_id=make_model_id(layer, model_name),
            model_name=model_name,
            comment=comment,
            layer=layer,
            subject=subject,
            created_at=now_stamp(self._clock()),
            updated_at="",
            creator=creator or self.default_creator,
            status=self.active_status,
        )
        await self.models.create(model)
        logger.info(f"Added model {model.model_id}")
        return model

    async def delete_model(self, layer: str, model_name: str) -> DeleteModelResult:
        """Remove the model row and every lineage row that references it."""
        model = await self.models.get_exact(layer, model_name)
        if not model:
            raise ModelNotFoundError(layer, model_name)

        await self.models.delete(model)

        related = await self.lineage.list_touching(model.model_id)
        deleted = await self.lineage.delete_many(related)

        logger.info(f"Deleted model {model.model_id} and {deleted} lineage row(s)")
        return DeleteModelResult(model_id=model.model_id, deleted_models=1, deleted_lineages=deleted)

    async def model_lineage(self, layer: str, model_name: str) -> ModelLineage:
        model = await self.models.get_exact(layer, model_name)
        if not model:
            raise ModelNotFoundError(layer, model_name)

        related = await self.lineage.list_touching(model.model_id)
        return ModelLineage(
            model=model,
            upstream=[l for l in related if l.target_model_id == model.model_id],
            downstream=[l for l in related if l.source_model_id == model.model_id],
        )

    # ─── Lineage ───

    async def _require_model(self, layer: str, model_name: str, hint: str = "") -> ModelRecord:
        model = await self.models.get_exact(layer, model_name)
        if not model:
            raise ModelNotFoundError(layer, model_name, hint)
        return model

    async def add_lineage(
        self,
        source_layer: str,
        source_model: str,
        target_layer: str,
        target_model: str,
        task_name: str,
        task_location: str,
        schedule_name: str,
        schedule_location: str,
        remarks: str = "",
        creator: str | None = None,
    ) -> AddLineageResult:
        hint = "add the model first"
        source = await self._require_model(source_layer, source_model, hint)
        target = await self._require_model(target_layer, target_model, hint)

        if await self.lineage.get_between(source.model_id, target.model_id):
            raise LineageExistsError(source.label, target.label)

        now = self._clock()
        lineage = LineageRecord(
            relation_id=make_relation_id(now),
            source_model_id=source.model_id,
            target_model_id=target.model_id,
            task_name=task_name,
            task_location=task_location,
            schedule_name=schedule_name,
            schedule_location=schedule_location,
            remarks=remarks or "",
            created_at=now_stamp(now),
            updated_at="",
            creator=creator or self.default_creator,
            status=self.active_status,
        )
        await self.lineage.create(lineage)
        logger.info(f"Added lineage {lineage.relation_id}: {source.model_id} -> {target.model_id}")

        return AddLineageResult(
            relation_id=lineage.relation_id,
            source=model_label(source_layer, source_model),
            target=model_label(target_layer, target_model),
        )

    async def check_lineage(
        self,
        source_layer: str,
        source_model: str,
        target_layer: str,
        target_model: str,
    ) -> LineageCheck:
        """Resolve both endpoints and the lineage row between them, without deleting."""
        source = await self._require_model(source_layer, source_model)
        target = await self._require_model(target_layer, target_model)

        lineage = await self.lineage.get_between(source.model_id, target.model_id)
        if not lineage:
            raise LineageNotFoundError(source.label, target.label)

        return LineageCheck(lineage=lineage, source=source, target=target)

    async def delete_lineage(
        self,
        source_layer: str,
        source_model: str,
        target_layer: str,
        target_model: str,
    ) -> LineageRecord:
        check = await self.check_lineage(source_layer, source_model, target_layer, target_model)
        await self.lineage.delete(check.lineage)
        logger.info(f"Deleted lineage {check.lineage.relation_id}")
        return check.lineage
