"""Feishu (Lark) online spreadsheet connector."""

from __future__ import annotations

import logging
import re
import time
from typing import Any, Callable

import httpx

from lineagedesk.connectors.base import SheetConnector
from lineagedesk.core.errors import SheetsAPIError, SheetsAuthError

logger = logging.getLogger("lineagedesk.sheets")

DEFAULT_BASE_URL = "https://open.feishu.cn/open-apis"
TOKEN_PATH = "/auth/v3/tenant_access_token/internal"
JSON_CONTENT_TYPE = "application/json; charset=utf-8"


def range_start_row(cell_range: str) -> int:
    """First row number of an A1-style range such as ``sheet!A5:L5`` (0 if none)."""
    match = re.search(r"[A-Z]+(\d+)", cell_range.split("!")[-1])
    return int(match.group(1)) if match else 0


def column_letter(index: int) -> str:
    """1-based column number to its letter name (1 -> A, 27 -> AA)."""
    letters = ""
    while index > 0:
        index, rem = divmod(index - 1, 26)
        letters = chr(ord("A") + rem) + letters
    return letters


def normalize_cell(value: Any) -> str:
    """Flatten a cell value returned by the values API to a plain string.

    Empty cells come back as None, numbers as numbers, and links or
    mentions as a list of rich-text segments.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, list):
        return "".join(normalize_cell(seg.get("text") if isinstance(seg, dict) else seg) for seg in value)
    if isinstance(value, dict):
        return normalize_cell(value.get("text") or value.get("link"))
    return str(value)


def _decode(resp: httpx.Response) -> dict:
    try:
        payload = resp.json()
    except ValueError:
        raise SheetsAPIError(resp.status_code, resp.text[:200] or resp.reason_phrase)
    if not isinstance(payload, dict):
        raise SheetsAPIError(resp.status_code, f"unexpected response body: {payload!r}")
    return payload


class TenantTokenCache:
    """In-memory tenant_access_token with a fixed refresh margin.

    The provider issues tokens for ``expire`` seconds (two hours); the
    cached token is treated as stale ``refresh_margin`` seconds early.
    """

    def __init__(
        self,
        app_id: str,
        app_secret: str,
        refresh_margin: int = 300,
        clock: Callable[[], float] = time.time,
    ):
        self.app_id = app_id
        self.app_secret = app_secret
        self.refresh_margin = refresh_margin
        self._clock = clock
        self._token: str | None = None
        self._expires_at = 0.0

    @property
    def valid(self) -> bool:
        return self._token is not None and self._clock() < self._expires_at

    async def get(self, client: httpx.AsyncClient) -> str:
        if self.valid:
            return self._token

        try:
            resp = await client.post(
                TOKEN_PATH,
                json={"app_id": self.app_id, "app_secret": self.app_secret},
                headers={"Content-Type": JSON_CONTENT_TYPE},
            )
        except httpx.HTTPError as e:
            logger.error(f"tenant_access_token request failed: {e}")
            raise SheetsAuthError(-1, str(e)) from e

        data = _decode(resp)
        if data.get("code") != 0:
            logger.error(f"tenant_access_token rejected: {data.get('msg')}")
            raise SheetsAuthError(data.get("code", resp.status_code), data.get("msg") or resp.text)

        self._token = data["tenant_access_token"]
        self._expires_at = self._clock() + (int(data.get("expire", 0)) - self.refresh_margin)
        logger.info(f"Obtained tenant_access_token (expires in {data.get('expire')}s)")
        return self._token

    def invalidate(self) -> None:
        self._token = None
        self._expires_at = 0.0


class FeishuSheetsConnector(SheetConnector):
    """Read and write rows of one Feishu spreadsheet through the v2 values API."""

    def __init__(
        self,
        app_id: str,
        app_secret: str,
        spreadsheet_token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: int = 30,
        token_refresh_margin: int = 300,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.base_url = base_url.rstrip("/")
        self.spreadsheet_token = spreadsheet_token
        self.timeout = timeout
        self.transport = transport
        self.tokens = TenantTokenCache(app_id, app_secret, token_refresh_margin, clock)
        self._client: httpx.AsyncClient | None = None

    @property
    def _spreadsheet_path(self) -> str:
        return f"/sheets/v2/spreadsheets/{self.spreadsheet_token}"

    async def connect(self) -> None:
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self.transport,
        )

    async def disconnect(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def call_api(
        self,
        method: str,
        path: str,
        json: dict | None = None,
        params: dict | None = None,
    ) -> dict:
        """Send an authenticated request and return the ``data`` member.

        Raises SheetsAPIError when the response ``code`` is not 0.
        """
        if not self._client:
            await self.connect()

        token = await self.tokens.get(self._client)
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": JSON_CONTENT_TYPE,
        }

        try:
            resp = await self._client.request(method, path, json=json, params=params, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise SheetsAPIError(-1, str(e)) from e

        payload = _decode(resp)
        if payload.get("code") != 0:
            logger.error(f"{method} {path} returned code={payload.get('code')}: {payload.get('msg')}")
            raise SheetsAPIError(payload.get("code", resp.status_code), payload.get("msg") or str(payload))

        return payload.get("data") or {}

    async def read_values(self, sheet_id: str, range: str = "") -> list[list[str]]:
        target = f"{sheet_id}!{range}" if range else sheet_id
        data = await self.call_api("GET", f"{self._spreadsheet_path}/values/{target}")

        rows = (data.get("valueRange") or {}).get("values") or data.get("values") or []
        values = [[normalize_cell(cell) for cell in (row or [])] for row in rows]

        # The API pads the returned range with blank rows
        while values and not any(values[-1]):
            values.pop()
        return values

    async def write_values(self, sheet_id: str, range: str, values: list[list[Any]]) -> dict:
        return await self.call_api(
            "PUT",
            f"{self._spreadsheet_path}/values",
            json={"valueRange": {"range": f"{sheet_id}!{range}", "values": values}},
        )

    async def append_row(self, sheet_id: str, row: list[Any]) -> int:
        try:
            existing = await self.read_values(sheet_id)
        except SheetsAPIError as e:
            logger.warning(f"Could not read {sheet_id} before append ({e}); using values_append")
            data = await self.call_api(
                "POST",
                f"{self._spreadsheet_path}/values_append",
                params={"insertDataOption": "INSERT_ROWS"},
                json={"valueRange": {"range": f"{sheet_id}!A:Z", "values": [row]}},
            )
            return range_start_row(data.get("updates", {}).get("updatedRange", ""))

        next_row = len(existing) + 1
        last_col = column_letter(max(len(row), 1))
        logger.info(f"Appending row {next_row} to sheet {sheet_id}")
        await self.write_values(sheet_id, f"A{next_row}:{last_col}{next_row}", [row])
        return next_row

    async def delete_rows(self, sheet_id: str, start_row: int, end_row: int) -> dict:
        logger.info(f"Deleting rows {start_row}-{end_row} from sheet {sheet_id}")
        return await self.call_api(
            "DELETE",
            f"{self._spreadsheet_path}/dimension_range",
            json={
                "dimension": {
                    "sheetId": sheet_id,
                    "majorDimension": "ROWS",
                    "startIndex": start_row,
                    "endIndex": end_row,
                }
            },
        )

    def info(self) -> dict:
        return {
            "type": "feishu",
            "base_url": self.base_url,
            "spreadsheet_token": self.spreadsheet_token,
            "token_cached": self.tokens.valid,
        }


def feishu_sheets(
    app_id: str,
    app_secret: str,
    spreadsheet_token: str,
    base_url: str = DEFAULT_BASE_URL,
    timeout: int = 30,
    token_refresh_margin: int = 300,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FeishuSheetsConnector:
    """Create a Feishu spreadsheet connector."""
    return FeishuSheetsConnector(
        app_id=app_id,
        app_secret=app_secret,
        spreadsheet_token=spreadsheet_token,
        base_url=base_url,
        timeout=timeout,
        token_refresh_margin=token_refresh_margin,
        transport=transport,
    )
