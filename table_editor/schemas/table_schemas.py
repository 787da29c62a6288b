from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class ColumnType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    JSON = "json"


class ColumnDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    type: ColumnType
    required: bool = False
    unique: bool = False


class TableInfo(BaseModel):
    id: str
    name: str
    columns: list[ColumnDefinition] = []


class TableRow(BaseModel):
    id: str
    data: dict[str, Any] = {}


class RowPage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    rows: list[TableRow]
    total_count: int = Field(alias="totalCount")


class TempRow(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    temp_id: str = Field(alias="tempId")
    data: dict[str, Any]
    is_new: Literal[True] = Field(default=True, alias="isNew")


class FilterRule(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    column: str
    operator: str = "eq"
    value: str = ""
    logical_operator: Literal["and", "or"] = Field(
        default="and",
        alias="logicalOperator",
    )


class SortSpec(BaseModel):
    column: str
    direction: Literal["asc", "desc"] = "asc"


class QueryOptions(BaseModel):
    filter: dict[str, Any] | None = None
    sort: SortSpec | None = None


class CommitResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    created_rows: int = Field(alias="createdRows")
    updated_rows: int = Field(alias="updatedRows")


class DeleteResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    deleted_rows: int = Field(alias="deletedRows")
