"""Tests for the Feishu spreadsheet connector."""

import httpx
import pytest

from lineagedesk.connectors.base import SheetConnector
from lineagedesk.connectors.feishu import (
    FeishuSheetsConnector, TenantTokenCache, column_letter, feishu_sheets, normalize_cell,
    range_start_row,
)
from lineagedesk.core.errors import SheetsAPIError, SheetsAuthError
from tests.conftest import FakeFeishu, MODELS_SHEET, SPREADSHEET, model_row


class FakeClock:
    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def _connector(feishu: FakeFeishu, clock=None) -> FeishuSheetsConnector:
    kwargs = {"clock": clock} if clock else {}
    return FeishuSheetsConnector(
        app_id="cli_test",
        app_secret="secret",
        spreadsheet_token=SPREADSHEET,
        transport=httpx.MockTransport(feishu.handler),
        **kwargs,
    )


class TestFactory:
    def test_feishu_sheets_factory(self):
        conn = feishu_sheets(app_id="a", app_secret="s", spreadsheet_token="tok", base_url="https://open.larksuite.com/open-apis/")
        assert isinstance(conn, FeishuSheetsConnector)
        assert isinstance(conn, SheetConnector)
        assert conn.base_url == "https://open.larksuite.com/open-apis"
        assert conn.spreadsheet_token == "tok"

    def test_info_does_not_expose_secret(self):
        conn = feishu_sheets(app_id="a", app_secret="s3cr3t", spreadsheet_token="tok")
        info = conn.info()
        assert info["type"] == "feishu"
        assert info["token_cached"] is False
        assert "s3cr3t" not in str(info)


class TestHelpers:
    @pytest.mark.parametrize("index,letter", [(1, "A"), (9, "I"), (12, "L"), (26, "Z"), (27, "AA"), (52, "AZ")])
    def test_column_letter(self, index, letter):
        assert column_letter(index) == letter

    @pytest.mark.parametrize("cell_range,row", [("mdl001!A5:I5", 5), ("A12:L12", 12), ("mdl001!AB3:AC3", 3), ("mdl001", 0)])
    def test_range_start_row(self, cell_range, row):
        assert range_start_row(cell_range) == row

    def test_normalize_cell(self):
        assert normalize_cell(None) == ""
        assert normalize_cell("ods") == "ods"
        assert normalize_cell(3) == "3"
        assert normalize_cell(3.0) == "3"
        assert normalize_cell(2.5) == "2.5"
        assert normalize_cell(True) == "TRUE"
        assert normalize_cell([{"type": "text", "text": "see "}, {"type": "url", "text": "wiki", "link": "https://x"}]) == "see wiki"


class TestTenantToken:
    @pytest.mark.asyncio
    async def test_token_is_cached(self, feishu):
        conn = _connector(feishu)
        await conn.read_values(MODELS_SHEET)
        await conn.read_values(MODELS_SHEET)
        assert feishu.token_calls == 1
        token_req = feishu.calls("POST", "/tenant_access_token/internal")[0]
        assert b'"app_id"' in token_req.content and b'"cli_test"' in token_req.content
        await conn.disconnect()

    @pytest.mark.asyncio
    async def test_token_refreshed_before_expiry(self, feishu):
        clock = FakeClock()
        conn = _connector(feishu, clock=clock)
        await conn.read_values(MODELS_SHEET)

        # Still inside expire - 300s
        clock.now += 7200 - 301
        await conn.read_values(MODELS_SHEET)
        assert feishu.token_calls == 1

        # Inside the 5-minute margin
        clock.now += 2
        await conn.read_values(MODELS_SHEET)
        assert feishu.token_calls == 2
        await conn.disconnect()

    @pytest.mark.asyncio
    async def test_invalidate(self, feishu):
        conn = _connector(feishu)
        await conn.read_values(MODELS_SHEET)
        conn.tokens.invalidate()
        assert not conn.tokens.valid
        await conn.read_values(MODELS_SHEET)
        assert feishu.token_calls == 2
        await conn.disconnect()

    @pytest.mark.asyncio
    async def test_token_rejected(self, feishu):
        feishu.token_code = 10014
        conn = _connector(feishu)
        with pytest.raises(SheetsAuthError, match="app secret invalid"):
            await conn.read_values(MODELS_SHEET)
        await conn.disconnect()

    @pytest.mark.asyncio
    async def test_cache_direct(self, feishu):
        cache = TenantTokenCache("cli_test", "secret", refresh_margin=60, clock=FakeClock())
        async with httpx.AsyncClient(
            base_url="https://open.feishu.cn/open-apis",
            transport=httpx.MockTransport(feishu.handler),
        ) as client:
            assert await cache.get(client) == FakeFeishu.TOKEN
            assert cache.valid


class TestCallApi:
    @pytest.mark.asyncio
    async def test_sends_bearer_and_json_headers(self, sheets, feishu):
        await sheets.read_values(MODELS_SHEET)
        req = feishu.calls("GET", f"/values/{MODELS_SHEET}")[0]
        assert req.headers["Authorization"] == f"Bearer {FakeFeishu.TOKEN}"
        assert req.headers["Content-Type"] == "application/json; charset=utf-8"

    @pytest.mark.asyncio
    async def test_non_zero_code_raises(self, sheets):
        with pytest.raises(SheetsAPIError) as exc:
            await sheets.read_values("no_such_sheet")
        assert exc.value.code == 90202
        assert "sheet read failed" in str(exc.value)

    @pytest.mark.asyncio
    async def test_non_json_body_raises(self):
        def handler(request):
            if request.url.path.endswith("/tenant_access_token/internal"):
                return httpx.Response(200, json={"code": 0, "tenant_access_token": "t", "expire": 7200})
            return httpx.Response(502, text="Bad Gateway")

        conn = FeishuSheetsConnector("a", "s", "tok", transport=httpx.MockTransport(handler))
        with pytest.raises(SheetsAPIError) as exc:
            await conn.read_values("any")
        assert exc.value.code == 502
        await conn.disconnect()

    @pytest.mark.asyncio
    async def test_transport_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        conn = FeishuSheetsConnector("a", "s", "tok", transport=httpx.MockTransport(handler))
        with pytest.raises(SheetsAuthError) as exc:
            await conn.read_values("any")
        assert exc.value.code == -1
        await conn.disconnect()


class TestRowOperations:
    @pytest.mark.asyncio
    async def test_read_trims_blank_tail_and_normalizes(self, sheets, feishu):
        feishu.sheets[MODELS_SHEET].append(["ods.ods_orders", "orders", None, "ods", "trade", 45000, None, "bob", "有效"])
        rows = await sheets.read_values(MODELS_SHEET)
        assert len(rows) == 2
        assert rows[1] == ["ods.ods_orders", "orders", "", "ods", "trade", "45000", "", "bob", "有效"]

    @pytest.mark.asyncio
    async def test_read_with_range(self, sheets, feishu):
        await sheets.read_values(MODELS_SHEET, "A1:I10")
        assert feishu.calls("GET", f"/values/{MODELS_SHEET}!A1:I10")

    @pytest.mark.asyncio
    async def test_append_writes_after_last_row(self, sheets, feishu):
        feishu.sheets[MODELS_SHEET].append(model_row("ods", "orders"))
        row = model_row("dwd", "orders")
        assert await sheets.append_row(MODELS_SHEET, row) == 3

        put = feishu.calls("PUT", "/values")[0]
        assert b'"mdl001!A3:I3"' in put.content
        assert feishu.sheets[MODELS_SHEET][2] == row

    @pytest.mark.asyncio
    async def test_append_falls_back_when_read_fails(self, sheets, feishu):
        feishu.failing_reads.add(MODELS_SHEET)
        row = model_row("ods", "users")
        assert await sheets.append_row(MODELS_SHEET, row) == 2

        append = feishu.calls("POST", "/values_append")[0]
        assert append.url.params["insertDataOption"] == "INSERT_ROWS"
        assert feishu.sheets[MODELS_SHEET][-1] == row

    @pytest.mark.asyncio
    async def test_delete_rows(self, sheets, feishu):
        feishu.sheets[MODELS_SHEET].extend([model_row("ods", "a"), model_row("ods", "b"), model_row("ods", "c")])
        await sheets.delete_rows(MODELS_SHEET, 3, 3)

        names = [r[1] for r in feishu.sheets[MODELS_SHEET][1:]]
        assert names == ["a", "c"]
        req = feishu.calls("DELETE", "/dimension_range")[0]
        assert b'"majorDimension":"ROWS"' in req.content.replace(b" ", b"")

    @pytest.mark.asyncio
    async def test_context_manager(self, feishu):
        async with _connector(feishu) as conn:
            assert conn._client is not None
        assert conn._client is None
