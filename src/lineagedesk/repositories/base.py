"""Shared plumbing for sheet-backed repositories."""

from __future__ import annotations

from lineagedesk.connectors.base import SheetConnector
from lineagedesk.sheets.records import SheetRecord, parse_rows


class SheetRepository:
    """Rows of one worksheet mapped to ``record_cls``.

    Every read re-fetches the sheet; nothing is cached between calls.
    """

    record_cls: type[SheetRecord] = SheetRecord

    def __init__(self, sheets: SheetConnector, sheet_id: str, active_status: str):
        self.sheets = sheets
        self.sheet_id = sheet_id
        self.active_status = active_status

    def is_visible(self, record) -> bool:
        return record.status in (self.active_status, "")

    async def list_rows(self) -> list:
        rows = await self.sheets.read_values(self.sheet_id)
        return parse_rows(self.record_cls, rows)

    async def list_active(self) -> list:
        return [r for r in await self.list_rows() if self.is_visible(r)]

    async def create(self, record: SheetRecord) -> SheetRecord:
        record.row_index = await self.sheets.append_row(self.sheet_id, record.to_row())
        return record

    async def delete(self, record: SheetRecord) -> None:
        await self.sheets.delete_rows(self.sheet_id, record.row_index, record.row_index)

    async def delete_many(self, records: list[SheetRecord]) -> int:
        # Bottom-up, so each deletion leaves the remaining row numbers valid
        for record in sorted(records, key=lambda r: r.row_index, reverse=True):
            await self.delete(record)
        return len(records)
