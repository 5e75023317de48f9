"""Sheet row <-> record mapping by fixed column offset."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime

# First data row; row 1 holds the column headers
FIRST_DATA_ROW = 2

TIMESTAMP_FORMAT = "%Y/%m/%d %H:%M"


def now_stamp(now: datetime | None = None) -> str:
    return (now or datetime.now()).strftime(TIMESTAMP_FORMAT)


def _cell(row: list[str], index: int) -> str:
    return row[index] if index < len(row) and row[index] is not None else ""


@dataclass
class SheetRecord:
    """A data row; ``row_index`` is its 1-based row number in the sheet.

    Column order is the dataclass field order after ``row_index``.
    """

    row_index: int = 0

    @classmethod
    def columns(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls) if f.name != "row_index")

    @classmethod
    def from_row(cls, row: list[str], row_index: int = 0):
        values = {name: _cell(row, i) for i, name in enumerate(cls.columns())}
        return cls(row_index=row_index, **values)

    def to_row(self) -> list[str]:
        return [getattr(self, name) for name in self.columns()]

    def to_dict(self) -> dict:
        return {name: getattr(self, name) for name in ("row_index", *self.columns())}


@dataclass
class ConfigEntry(SheetRecord):
    kind: str = ""
    name: str = ""
    description: str = ""
    order: str = ""
    status: str = ""


@dataclass
class ModelRecord(SheetRecord):
    model_id: str = ""
    model_name: str = ""
    comment: str = ""
    layer: str = ""
    subject: str = ""
    created_at: str = ""
    updated_at: str = ""
    creator: str = ""
    status: str = ""

    @property
    def label(self) -> str:
        return f"{self.layer}-{self.model_name}"


@dataclass
class LineageRecord(SheetRecord):
    relation_id: str = ""
    source_model_id: str = ""
    target_model_id: str = ""
    task_name: str = ""
    task_location: str = ""
    schedule_name: str = ""
    schedule_location: str = ""
    remarks: str = ""
    created_at: str = ""
    updated_at: str = ""
    creator: str = ""
    status: str = ""


def parse_rows(record_cls: type[SheetRecord], rows: list[list[str]]) -> list:
    """Map every non-blank data row below the header to ``record_cls``."""
    return [
        record_cls.from_row(row, row_index=i + FIRST_DATA_ROW)
        for i, row in enumerate(rows[1:])
        if any(row)
    ]


def make_model_id(layer: str, model_name: str) -> str:
    return f"{layer}.{layer}_{model_name}"


def make_relation_id(now: datetime | None = None) -> str:
    moment = now or datetime.now()
    return f"relation_{int(moment.timestamp() * 1000)}"


@dataclass
class CatalogOptions:
    layers: list[str] = field(default_factory=list)
    subjects: list[str] = field(default_factory=list)
