"""
Conversions between the three representations of a cell value.

* display - read-only text shown in the table
* input   - text held in an edit buffer while a field is being typed
* submission - the value sent to the table rows API

Display and input conversions never raise; submission only raises for
malformed JSON text.
"""

import json
import math
from datetime import date, datetime, timezone
from typing import Any

from table_editor.commons.exceptions import InvalidFieldValue
from table_editor.schemas.table_schemas import ColumnDefinition, ColumnType


NULL_DISPLAY = "NULL"


def _to_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    return datetime.fromisoformat(str(value))


def _format_date_for_display(value: Any) -> str:
    dt = _parse_datetime(value)
    # en-US medium date with a 2-digit 12-hour time, e.g. "Jan 15, 2024, 10:30 AM"
    return f"{dt:%b} {dt.day}, {dt.year}, {dt:%I:%M %p}"


def _format_date_for_input(value: Any) -> str:
    dt = _parse_datetime(value)
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    return dt.date().isoformat()


def _format_json(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, indent=2)


def format_for_display(value: Any, column_type: ColumnType) -> str:
    if value is None:
        return NULL_DISPLAY
    try:
        if column_type == ColumnType.JSON:
            return _format_json(value)
        if column_type == ColumnType.BOOLEAN:
            return "TRUE" if value else "FALSE"
        if column_type == ColumnType.DATE and value:
            return _format_date_for_display(value)
    except (TypeError, ValueError, OverflowError):
        return str(value)
    return _to_text(value)


def format_for_input(value: Any, column_type: ColumnType) -> str:
    if value is None:
        return ""
    try:
        if column_type == ColumnType.JSON:
            return _format_json(value)
        if column_type == ColumnType.DATE and value:
            return _format_date_for_input(value)
    except (TypeError, ValueError, OverflowError):
        return str(value)
    return _to_text(value)


def _parse_number(value: Any) -> Any:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None

    text = str(value).strip()
    if not text:
        return 0
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        # Not validated: unparseable input is submitted as null
        return None
    # JSON has no NaN or Infinity, both go over the wire as null
    return number if math.isfinite(number) else None


def _parse_json(value: Any, column: str) -> Any:
    if not isinstance(value, str):
        return value
    if value == "":
        return None
    try:
        return json.loads(value)
    except json.JSONDecodeError as e:
        raise InvalidFieldValue(column) from e


def coerce_for_submission(value: Any, column: ColumnDefinition) -> Any:
    """Convert a staged value into the form sent over the wire"""
    if column.type == ColumnType.NUMBER:
        return _parse_number(value)
    if column.type == ColumnType.JSON:
        return _parse_json(value, column.name)
    if column.type == ColumnType.BOOLEAN:
        return bool(value)
    if column.type == ColumnType.DATE:
        if not value:
            return None
        if isinstance(value, date):
            return _format_date_for_input(value)
        return value

    if not value or (isinstance(value, str) and not value.strip()):
        return None
    return value


def clean_row_data(
    columns: list[ColumnDefinition],
    row_data: dict[str, Any],
) -> dict[str, Any]:
    """Coerce a full row, one value per column"""
    return {col.name: coerce_for_submission(row_data.get(col.name), col) for col in columns}


def clean_patch(
    columns: list[ColumnDefinition],
    patch: dict[str, Any],
) -> dict[str, Any]:
    """
    Coerce only the fields present in a patch. Fields of unknown columns are
    passed through and left for the API to reject.
    """
    by_name = {col.name: col for col in columns}
    cleaned = {}
    for name, value in patch.items():
        col = by_name.get(name)
        cleaned[name] = coerce_for_submission(value, col) if col else value
    return cleaned


def create_initial_row_data(columns: list[ColumnDefinition]) -> dict[str, Any]:
    return {
        col.name: False if col.type == ColumnType.BOOLEAN else None for col in columns
    }


def is_field_empty(value: Any, column_type: ColumnType) -> bool:
    if value is None:
        return True
    if column_type == ColumnType.BOOLEAN:
        return False
    if isinstance(value, str):
        return value.strip() == ""
    return False


def missing_required_fields(
    columns: list[ColumnDefinition],
    row_data: dict[str, Any],
) -> list[str]:
    """Names of required columns that have no value yet"""
    return [
        col.name
        for col in columns
        if col.required and is_field_empty(row_data.get(col.name), col.type)
    ]
