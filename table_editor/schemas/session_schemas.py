from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from table_editor.schemas.table_schemas import (
    ColumnDefinition,
    FilterRule,
    SortSpec,
    TempRow,
)


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class CreateSessionRequest(CamelModel):
    workspace_id: str = Field(alias="workspaceId")
    columns: list[ColumnDefinition] | None = None


class CellUpdate(BaseModel):
    column: str
    value: Any = None


class StagedRow(TempRow):
    missing_required: list[str] = Field(default=[], alias="missingRequired")


class SessionSnapshot(CamelModel):
    session_id: str = Field(alias="sessionId")
    table_id: str = Field(alias="tableId")
    state: str
    new_rows: list[StagedRow] = Field(alias="newRows")
    pending_changes: dict[str, dict[str, Any]] = Field(alias="pendingChanges")
    has_pending_changes: bool = Field(alias="hasPendingChanges")
    saving: bool
    error: str | None = None


class BulkDeleteRequest(CamelModel):
    workspace_id: str = Field(alias="workspaceId")
    row_ids: list[str] = Field(alias="rowIds")


class CompileFiltersRequest(BaseModel):
    rules: list[FilterRule] = []
    columns: list[ColumnDefinition] | None = None
    sort: SortSpec | None = None


class RowQueryRequest(CamelModel):
    workspace_id: str = Field(alias="workspaceId")
    rules: list[FilterRule] = []
    sort: SortSpec | None = None
    page: int = Field(default=0, ge=0)
