"""Base spreadsheet connector interface."""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any


class SheetConnector(ABC):
    """Base class for row-oriented spreadsheet backends.

    Rows are lists of cell strings. Row numbers are 1-based, as the
    spreadsheet shows them.
    """

    @abstractmethod
    async def connect(self) -> None:
        """Establish connection."""
        ...

    @abstractmethod
    async def disconnect(self) -> None:
        """Close connection."""
        ...

    @abstractmethod
    async def read_values(self, sheet_id: str, range: str = "") -> list[list[str]]:
        """Read a sheet (or a range of it) as a 2-D list of strings."""
        ...

    @abstractmethod
    async def write_values(self, sheet_id: str, range: str, values: list[list[Any]]) -> dict:
        """Overwrite a range with the given values."""
        ...

    @abstractmethod
    async def append_row(self, sheet_id: str, row: list[Any]) -> int:
        """Write a row after the last non-empty row and return its row number."""
        ...

    @abstractmethod
    async def delete_rows(self, sheet_id: str, start_row: int, end_row: int) -> dict:
        """Physically remove rows start_row..end_row (inclusive)."""
        ...

    def info(self) -> dict:
        return {"type": type(self).__name__}

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, *args):
        await self.disconnect()
