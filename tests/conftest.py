"""Shared test fixtures for Lineage Desk tests."""

import json
import re
from datetime import datetime

import httpx
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from lineagedesk.connectors.feishu import FeishuSheetsConnector
from lineagedesk.core.config import LineageDeskSettings
from lineagedesk.daemon.main import create_app
from lineagedesk.services.catalog_service import CatalogService

SPREADSHEET = "shtcnTest"
CONFIG_SHEET = "cfg001"
MODELS_SHEET = "mdl001"
LINEAGE_SHEET = "lin001"

FIXED_NOW = datetime(2024, 5, 1, 9, 30)

CONFIG_ROWS = [
    ["类型", "名称", "描述", "排序", "状态"],
    ["层级", "ods", "operational data", "1", "有效"],
    ["层级", "dwd", "detail", "2", "有效"],
    ["层级", "tmp", "scratch", "9", "无效"],
    ["主题域", "trade", "orders and payments", "1", "有效"],
    ["主题域", "user", "members", "2", "有效"],
]

MODEL_HEADER = ["模型ID", "模型名称", "模型注释", "层级", "主题域", "创建时间", "更新时间", "创建人", "状态"]

LINEAGE_HEADER = [
    "关系ID", "来源模型ID", "目标模型ID", "任务名称", "任务位置", "调度名称",
    "调度文件位置", "备注", "创建时间", "更新时间", "创建人", "状态",
]


def model_row(layer, name, comment="", subject="trade", status="有效"):
    return [f"{layer}.{layer}_{name}", name, comment, layer, subject, "2024/01/02 10:00", "", "alice", status]


def lineage_row(relation_id, source_id, target_id, status="有效"):
    return [
        relation_id, source_id, target_id, "load_task", "/jobs/load.py", "daily",
        "/schedules/daily.yaml", "", "2024/01/02 10:00", "", "alice", status,
    ]


class FakeFeishu:
    """In-memory stand-in for the Feishu auth and sheets v2 endpoints."""

    TOKEN = "t-test-token"

    def __init__(self, spreadsheet_token: str = SPREADSHEET):
        self.spreadsheet_token = spreadsheet_token
        self.sheets: dict[str, list[list]] = {}
        self.requests: list[httpx.Request] = []
        self.token_calls = 0
        self.token_code = 0
        self.expire = 7200
        self.failing_reads: set[str] = set()

    # ─── helpers ───

    @staticmethod
    def _ok(data=None, **extra) -> httpx.Response:
        return httpx.Response(200, json={"code": 0, "msg": "success", "data": data or {}, **extra})

    @staticmethod
    def _error(code: int, msg: str, status: int = 400) -> httpx.Response:
        return httpx.Response(status, json={"code": code, "msg": msg})

    def calls(self, method: str, suffix: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path.endswith(suffix)]

    def _set_row(self, sheet_id: str, row_number: int, values: list) -> None:
        rows = self.sheets.setdefault(sheet_id, [])
        while len(rows) < row_number:
            rows.append([])
        rows[row_number - 1] = list(values)

    # ─── transport handler ───

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        body = json.loads(request.content) if request.content else {}

        if path.endswith("/auth/v3/tenant_access_token/internal"):
            self.token_calls += 1
            if self.token_code != 0:
                return self._error(self.token_code, "app secret invalid")
            return httpx.Response(200, json={
                "code": 0, "msg": "ok", "tenant_access_token": self.TOKEN, "expire": self.expire,
            })

        if request.headers.get("Authorization") != f"Bearer {self.TOKEN}":
            return self._error(99991663, "Invalid access token for authorization", status=401)

        prefix = f"/open-apis/sheets/v2/spreadsheets/{self.spreadsheet_token}"
        if not path.startswith(prefix):
            return self._error(90215, "spreadsheet not found", status=404)
        rest = path[len(prefix):]

        if request.method == "GET" and rest.startswith("/values/"):
            sheet_id = rest[len("/values/"):].split("!")[0]
            if sheet_id in self.failing_reads or sheet_id not in self.sheets:
                return self._error(90202, "sheet read failed")
            rows = [list(r) for r in self.sheets[sheet_id]]
            width = max((len(r) for r in rows), default=1)
            # Real responses pad the range with blank rows
            padded = rows + [[None] * width]
            return self._ok({"valueRange": {"range": sheet_id, "values": padded, "revision": 1}})

        if request.method == "PUT" and rest == "/values":
            sheet_id, cells = body["valueRange"]["range"].split("!")
            start_row = int(re.match(r"[A-Z]+(\d+)", cells).group(1))
            for offset, values in enumerate(body["valueRange"]["values"]):
                self._set_row(sheet_id, start_row + offset, values)
            return self._ok({"updatedRange": body["valueRange"]["range"]})

        if request.method == "POST" and rest == "/values_append":
            sheet_id = body["valueRange"]["range"].split("!")[0]
            rows = self.sheets.setdefault(sheet_id, [])
            start_row = len(rows) + 1
            rows.extend(list(v) for v in body["valueRange"]["values"])
            return self._ok({
                "tableRange": body["valueRange"]["range"],
                "updates": {"updatedRange": f"{sheet_id}!A{start_row}:L{len(rows)}"},
            })

        if request.method == "DELETE" and rest == "/dimension_range":
            dim = body["dimension"]
            rows = self.sheets[dim["sheetId"]]
            del rows[dim["startIndex"] - 1:dim["endIndex"]]
            return self._ok({"delCount": dim["endIndex"] - dim["startIndex"] + 1, "majorDimension": "ROWS"})

        return self._error(404, f"unexpected {request.method} {path}", status=404)


@pytest.fixture
def feishu() -> FakeFeishu:
    fake = FakeFeishu()
    fake.sheets[CONFIG_SHEET] = [list(r) for r in CONFIG_ROWS]
    fake.sheets[MODELS_SHEET] = [list(MODEL_HEADER)]
    fake.sheets[LINEAGE_SHEET] = [list(LINEAGE_HEADER)]
    return fake


@pytest_asyncio.fixture
async def sheets(feishu):
    connector = FeishuSheetsConnector(
        app_id="cli_test",
        app_secret="secret",
        spreadsheet_token=SPREADSHEET,
        transport=httpx.MockTransport(feishu.handler),
    )
    yield connector
    await connector.disconnect()


@pytest.fixture
def settings() -> LineageDeskSettings:
    return LineageDeskSettings(
        api_key="test_key",
        app_id="cli_test",
        app_secret="secret",
        spreadsheet_token=SPREADSHEET,
        config_sheet=CONFIG_SHEET,
        models_sheet=MODELS_SHEET,
        lineage_sheet=LINEAGE_SHEET,
    )


@pytest.fixture
def catalog(sheets) -> CatalogService:
    return CatalogService(
        sheets,
        config_sheet=CONFIG_SHEET,
        models_sheet=MODELS_SHEET,
        lineage_sheet=LINEAGE_SHEET,
        clock=lambda: FIXED_NOW,
    )


@pytest_asyncio.fixture
async def app(settings, sheets):
    """App wired to the fake spreadsheet."""
    return create_app(settings=settings, sheets=sheets)


@pytest_asyncio.fixture
async def client(app):
    """Async HTTP client pointed at the test app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        headers={"Authorization": "Bearer test_key"},
    ) as c:
        yield c


@pytest_asyncio.fixture
async def unauthed_client(app):
    """Async HTTP client without auth."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
