"""Model sheet repository."""

from lineagedesk.repositories.base import SheetRepository
from lineagedesk.sheets.records import ModelRecord


class ModelRepository(SheetRepository):
    record_cls = ModelRecord

    async def search(self, layer: str = "", name: str = "") -> list[ModelRecord]:
        """Exact layer, case-insensitive name substring; blank arguments match everything."""
        needle = name.lower()
        return [
            m for m in await self.list_active()
            if (not layer or m.layer == layer)
            and (not name or needle in m.model_name.lower())
        ]

    async def get_exact(self, layer: str, name: str) -> ModelRecord | None:
        for model in await self.search(layer, name):
            if model.layer == layer and model.model_name == name:
                return model
        return None
