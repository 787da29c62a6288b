import json
import os
import sys

import httpx
import pytest
from httpx import ASGITransport, AsyncClient


os.environ.setdefault("ENVIRONMENT", "test")

from table_editor import app, config  # noqa: E402
from table_editor.controllers.session_controller import get_transport, session_store  # noqa: E402
from table_editor.libs.log import get_logger  # noqa: E402
from table_editor.schemas.table_schemas import ColumnDefinition  # noqa: E402
from table_editor.services.table_client import TableClient  # noqa: E402


logger = get_logger(__name__)

if config.ENVIRONMENT != "test":
    logger.error('Tests must be run with "ENVIRONMENT=test"')
    sys.exit(1)


class FakeTableApi:
    """Records requests to the table rows API and answers them in-process"""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        # path -> (status, body) overriding the default success response
        self.failures: dict[tuple[str, str], tuple[int, dict | str]] = {}
        self.table = {
            "id": "tbl_1",
            "name": "People",
            "columns": [
                {"name": "name", "type": "string", "required": True},
                {"name": "age", "type": "number"},
            ],
        }
        self.rows: list[dict] = [{"id": "row_1", "data": {"name": "Bob", "age": 41}}]

    def fail(self, method: str, path: str, status: int = 400, body: dict | str | None = None):
        self.failures[(method, path)] = (status, {} if body is None else body)

    def calls(self, method: str | None = None) -> list[httpx.Request]:
        return [r for r in self.requests if method is None or r.method == method]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/api")

        if (request.method, path) in self.failures:
            status, body = self.failures[(request.method, path)]
            if isinstance(body, str):
                return httpx.Response(status, text=body)
            return httpx.Response(status, json=body)

        if request.method == "GET" and path.endswith("/rows"):
            return httpx.Response(
                200,
                json={"rows": self.rows, "totalCount": len(self.rows)},
            )
        if request.method == "GET":
            return httpx.Response(200, json={"table": self.table})
        return httpx.Response(200, json={"success": True})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


def request_json(request: httpx.Request) -> dict:
    return json.loads(request.content)


@pytest.fixture
def fake_api() -> FakeTableApi:
    return FakeTableApi()


@pytest.fixture
def table_client(fake_api) -> TableClient:
    return TableClient(
        workspace_id="ws_1",
        base_url="http://tables.test/api",
        transport=fake_api.transport,
    )


@pytest.fixture
def columns() -> list[ColumnDefinition]:
    return [
        ColumnDefinition(name="name", type="string", required=True),
        ColumnDefinition(name="age", type="number"),
        ColumnDefinition(name="active", type="boolean"),
        ColumnDefinition(name="born", type="date"),
        ColumnDefinition(name="meta", type="json"),
    ]


@pytest.fixture
async def client(fake_api):
    app.dependency_overrides[get_transport] = lambda: fake_api.transport
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
    session_store.clear()
