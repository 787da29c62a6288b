import httpx
from fastapi import APIRouter, Depends

from table_editor.controllers.session_controller import get_transport
from table_editor.schemas.session_schemas import (
    BulkDeleteRequest,
    CompileFiltersRequest,
    RowQueryRequest,
)
from table_editor.schemas.table_schemas import DeleteResult, QueryOptions, RowPage
from table_editor.services.batch_committer import BatchCommitter
from table_editor.services.filter_compiler import build_query_options
from table_editor.services.table_client import TableClient


router = APIRouter(tags=["tables"])


@router.post("/tables/{table_id}/rows/delete", response_model=DeleteResult)
async def delete_rows(
    table_id: str,
    body: BulkDeleteRequest,
    transport: httpx.AsyncBaseTransport | None = Depends(get_transport),
) -> DeleteResult:
    client = TableClient(workspace_id=body.workspace_id, transport=transport)
    committer = BatchCommitter(client=client, table_id=table_id, columns=[])
    return await committer.delete_rows(body.row_ids)


@router.post("/tables/{table_id}/rows/query", response_model=RowPage)
async def query_rows(
    table_id: str,
    body: RowQueryRequest,
    transport: httpx.AsyncBaseTransport | None = Depends(get_transport),
) -> RowPage:
    client = TableClient(workspace_id=body.workspace_id, transport=transport)
    table = await client.get_table(table_id)
    options = build_query_options(body.rules, table.columns, body.sort)
    return await client.get_rows(table_id, options, page=body.page)


@router.post("/filters/compile", response_model=QueryOptions)
async def compile_filters(body: CompileFiltersRequest) -> QueryOptions:
    return build_query_options(body.rules, body.columns, body.sort)
