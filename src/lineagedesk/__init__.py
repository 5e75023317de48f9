"""Lineage Desk — a data-model and lineage catalog kept in a Feishu spreadsheet."""

__version__ = "0.1.0"

__all__ = ["__version__"]
