"""Lineage sheet repository."""

from lineagedesk.repositories.base import SheetRepository
from lineagedesk.sheets.records import LineageRecord


class LineageRepository(SheetRepository):
    record_cls = LineageRecord

    async def get_between(self, source_model_id: str, target_model_id: str) -> LineageRecord | None:
        for lineage in await self.list_active():
            if lineage.source_model_id == source_model_id and lineage.target_model_id == target_model_id:
                return lineage
        return None

    async def list_touching(self, model_id: str) -> list[LineageRecord]:
        return [
            l for l in await self.list_active()
            if l.source_model_id == model_id or l.target_model_id == model_id
        ]
