import uuid

import httpx
from fastapi import APIRouter, Depends

from table_editor.commons.exceptions import SessionNotFound
from table_editor.libs.log import get_logger
from table_editor.schemas.session_schemas import (
    CellUpdate,
    CreateSessionRequest,
    SessionSnapshot,
    StagedRow,
)
from table_editor.services.batch_committer import BatchCommitter
from table_editor.services.edit_session import EditSession
from table_editor.services.table_client import TableClient
from table_editor.services.value_coder import missing_required_fields


logger = get_logger(__name__)

router = APIRouter(tags=["sessions"])

# Editing sessions live only in process memory
session_store: dict[str, EditSession] = {}


def get_transport() -> httpx.AsyncBaseTransport | None:
    """Transport used to reach the table rows API; None for the default"""
    return None


def get_session(session_id: str) -> EditSession:
    if session_id not in session_store:
        raise SessionNotFound(session_id)
    return session_store[session_id]


def snapshot(session_id: str, session: EditSession) -> SessionSnapshot:
    return SessionSnapshot(
        session_id=session_id,
        table_id=session.committer.table_id,
        state=session.state.value,
        new_rows=[
            StagedRow(
                temp_id=row.temp_id,
                data=row.data,
                missing_required=missing_required_fields(session.columns, row.data),
            )
            for row in session.new_rows
        ],
        pending_changes=session.pending_changes,
        has_pending_changes=session.has_pending_changes,
        saving=session.saving,
        error=session.last_error,
    )


@router.post("/tables/{table_id}/sessions", response_model=SessionSnapshot)
async def create_session(
    table_id: str,
    body: CreateSessionRequest,
    transport: httpx.AsyncBaseTransport | None = Depends(get_transport),
) -> SessionSnapshot:
    client = TableClient(workspace_id=body.workspace_id, transport=transport)
    columns = body.columns
    if columns is None:
        columns = (await client.get_table(table_id)).columns

    session_id = uuid.uuid4().hex
    session = EditSession(
        columns=columns,
        committer=BatchCommitter(client=client, table_id=table_id, columns=columns),
    )
    session_store[session_id] = session
    logger.info(f"Opened editing session {session_id} for table {table_id}")
    return snapshot(session_id, session)


@router.get("/sessions/{session_id}", response_model=SessionSnapshot)
async def read_session(session_id: str) -> SessionSnapshot:
    return snapshot(session_id, get_session(session_id))


@router.delete("/sessions/{session_id}", status_code=204)
async def close_session(session_id: str) -> None:
    get_session(session_id).discard()
    del session_store[session_id]
    logger.info(f"Closed editing session {session_id}")


@router.post("/sessions/{session_id}/rows", response_model=SessionSnapshot)
async def add_row(session_id: str) -> SessionSnapshot:
    session = get_session(session_id)
    session.add_new_row()
    return snapshot(session_id, session)


@router.patch("/sessions/{session_id}/rows/{temp_id}", response_model=SessionSnapshot)
async def update_new_row(
    session_id: str,
    temp_id: str,
    body: CellUpdate,
) -> SessionSnapshot:
    session = get_session(session_id)
    session.update_new_row_cell(temp_id, body.column, body.value)
    return snapshot(session_id, session)


@router.patch(
    "/sessions/{session_id}/changes/{row_id}",
    response_model=SessionSnapshot,
)
async def update_existing_row(
    session_id: str,
    row_id: str,
    body: CellUpdate,
) -> SessionSnapshot:
    session = get_session(session_id)
    session.update_existing_row_cell(row_id, body.column, body.value)
    return snapshot(session_id, session)


@router.post("/sessions/{session_id}/save", response_model=SessionSnapshot)
async def save_session(session_id: str) -> SessionSnapshot:
    session = get_session(session_id)
    await session.save()
    return snapshot(session_id, session)


@router.post("/sessions/{session_id}/discard", response_model=SessionSnapshot)
async def discard_session(session_id: str) -> SessionSnapshot:
    session = get_session(session_id)
    session.discard()
    return snapshot(session_id, session)
