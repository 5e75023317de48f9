"""Connectors — spreadsheet backends the catalog reads and writes rows through."""

from lineagedesk.connectors.base import SheetConnector
from lineagedesk.connectors.feishu import FeishuSheetsConnector, feishu_sheets

__all__ = ["SheetConnector", "FeishuSheetsConnector", "feishu_sheets"]
