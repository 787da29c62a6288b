import json
from typing import Any
from urllib.parse import quote

import httpx

from table_editor._config import config
from table_editor.commons.exceptions import RequestFailed
from table_editor.libs.log import get_logger
from table_editor.schemas.table_schemas import QueryOptions, RowPage, TableInfo


logger = get_logger(__name__)


def _segment(value: str) -> str:
    """Escape an id for use as one URL path segment"""
    return quote(value, safe="")


class TableClient:
    """Client for the table rows API of one workspace"""

    def __init__(
        self,
        workspace_id: str,
        base_url: str | None = None,
        api_token: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.workspace_id = workspace_id
        self.base_url = (base_url or config.TABLE_API_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else config.REQUEST_TIMEOUT
        self.transport = transport
        self.headers = {"Content-Type": "application/json"}
        api_token = api_token or config.TABLE_API_TOKEN
        if api_token:
            self.headers["Authorization"] = f"Bearer {api_token}"

    def _log_request(
        self,
        level: str,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
    ) -> None:
        """Log request details at the specified log level"""
        log_method = getattr(logger, level)
        log_method("Request details:")
        log_method(f"  Method: {method}")
        log_method(f"  URL: {url}")
        log_method(f"  Params: {params}")
        log_method(f"  Data: {data}")

    async def make_request(
        self,
        method: str,
        endpoint: str,
        fallback_error: str,
        params: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Make a single request to the table rows API.

        Any non-success status raises RequestFailed with the server's `error`
        text, or `fallback_error` when the response carries none. Nothing is
        retried.
        """
        url = f"{self.base_url}{endpoint}"
        logger.debug(f"Making {method} request to: {url}")

        try:
            async with httpx.AsyncClient(transport=self.transport) as client:
                response = await client.request(
                    method=method,
                    url=url,
                    headers=self.headers,
                    params=params,
                    json=data,
                    timeout=self.timeout,
                )
        except httpx.HTTPError as e:
            logger.error(f"Request to {url} failed: {e!r}")
            self._log_request("error", method, url, params, data)
            raise RequestFailed(fallback_error) from e

        try:
            result = response.json()
        except ValueError:
            result = {}
        if not isinstance(result, dict):
            result = {}

        if response.is_error:
            logger.error(f"Error response ({response.status_code}): {response.text}")
            self._log_request("error", method, url, params, data)
            raise RequestFailed(result.get("error") or fallback_error)

        return result

    async def get_table(self, table_id: str) -> TableInfo:
        """Get a table's definition, including its columns"""
        response = await self.make_request(
            "GET",
            f"/table/{_segment(table_id)}",
            "Failed to fetch table",
            params={"workspaceId": self.workspace_id},
        )
        return TableInfo.model_validate(response.get("table", response))

    async def get_rows(
        self,
        table_id: str,
        query_options: QueryOptions | None = None,
        page: int = 0,
        limit: int | None = None,
    ) -> RowPage:
        """Get one page of rows matching the given filter and sort"""
        limit = limit or config.ROWS_PER_PAGE
        params: dict[str, Any] = {
            "workspaceId": self.workspace_id,
            "limit": limit,
            "offset": page * limit,
        }
        if query_options and query_options.filter is not None:
            params["filter"] = json.dumps(query_options.filter)
        if query_options and query_options.sort is not None:
            params["sort"] = json.dumps(query_options.sort.model_dump())

        response = await self.make_request(
            "GET",
            f"/table/{_segment(table_id)}/rows",
            "Failed to fetch rows",
            params=params,
        )
        return RowPage(
            rows=response.get("rows", []),
            total_count=response.get("totalCount", 0),
        )

    async def create_row(self, table_id: str, data: dict[str, Any]) -> dict[str, Any]:
        return await self.make_request(
            "POST",
            f"/table/{_segment(table_id)}/rows",
            "Failed to add row",
            data={"workspaceId": self.workspace_id, "data": data},
        )

    async def update_row(
        self,
        table_id: str,
        row_id: str,
        data: dict[str, Any],
    ) -> dict[str, Any]:
        return await self.make_request(
            "PATCH",
            f"/table/{_segment(table_id)}/rows/{_segment(row_id)}",
            "Failed to update row",
            data={"workspaceId": self.workspace_id, "data": data},
        )

    async def delete_row(
        self,
        table_id: str,
        row_id: str,
        fallback_error: str = "Failed to delete row",
    ) -> dict[str, Any]:
        return await self.make_request(
            "DELETE",
            f"/table/{_segment(table_id)}/rows/{_segment(row_id)}",
            fallback_error,
            data={"workspaceId": self.workspace_id},
        )
