"""Config sheet repository — allowed layer and subject-domain names."""

from lineagedesk.connectors.base import SheetConnector
from lineagedesk.repositories.base import SheetRepository
from lineagedesk.sheets.records import CatalogOptions, ConfigEntry


class ConfigRepository(SheetRepository):
    record_cls = ConfigEntry

    def __init__(
        self,
        sheets: SheetConnector,
        sheet_id: str,
        active_status: str,
        layer_kind: str,
        subject_kind: str,
    ):
        super().__init__(sheets, sheet_id, active_status)
        self.layer_kind = layer_kind
        self.subject_kind = subject_kind

    def is_visible(self, record: ConfigEntry) -> bool:
        # Config entries must be marked active explicitly
        return record.status == self.active_status

    async def load_options(self) -> CatalogOptions:
        options = CatalogOptions()
        for entry in await self.list_active():
            if entry.kind == self.layer_kind:
                options.layers.append(entry.name)
            elif entry.kind == self.subject_kind:
                options.subjects.append(entry.name)
        return options
