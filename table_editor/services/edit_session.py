import inspect
import uuid
from collections.abc import Callable
from enum import Enum
from typing import Any

from table_editor.commons.exceptions import TableEditorError
from table_editor.libs.log import get_logger
from table_editor.schemas.table_schemas import ColumnDefinition, TableRow, TempRow
from table_editor.services.batch_committer import BatchCommitter
from table_editor.services.value_coder import create_initial_row_data


logger = get_logger(__name__)


class SessionState(str, Enum):
    CLEAN = "clean"
    DIRTY = "dirty"
    SAVING = "saving"
    ERROR = "error"


class EditSession:
    """
    In-memory overlay of staged edits for one table view.

    New rows are staged most-recent first and existing rows are edited
    through per-row patches, so rows fetched from the API are never mutated.
    Nothing reaches the API until `save()`.
    """

    def __init__(
        self,
        columns: list[ColumnDefinition],
        committer: BatchCommitter,
        on_success: Callable[[], Any] | None = None,
    ):
        self.columns = columns
        self.committer = committer
        self.on_success = on_success

        self.new_rows: list[TempRow] = []
        self.pending_changes: dict[str, dict[str, Any]] = {}
        self.saving = False
        self.last_error: str | None = None

        # Bumped by discard() so that a save finishing afterwards is ignored
        self._generation = 0

    @property
    def has_pending_changes(self) -> bool:
        return bool(self.new_rows) or bool(self.pending_changes)

    @property
    def state(self) -> SessionState:
        if self.saving:
            return SessionState.SAVING
        if self.last_error is not None:
            return SessionState.ERROR
        if self.has_pending_changes:
            return SessionState.DIRTY
        return SessionState.CLEAN

    def add_new_row(self) -> TempRow:
        row = TempRow(
            temp_id=f"temp-{uuid.uuid4().hex}",
            data=create_initial_row_data(self.columns),
        )
        self.new_rows.insert(0, row)
        return row

    def update_new_row_cell(self, temp_id: str, column: str, value: Any) -> None:
        for row in self.new_rows:
            if row.temp_id == temp_id:
                row.data = {**row.data, column: value}
                return
        logger.debug(f"Ignoring edit of unknown staged row {temp_id}")

    def update_existing_row_cell(self, row_id: str, column: str, value: Any) -> None:
        patch = self.pending_changes.setdefault(row_id, {})
        patch[column] = value

    def effective_value(self, row: TableRow, column: str) -> Any:
        """Value of a cell with this session's patch applied over the fetched row"""
        patch = self.pending_changes.get(row.id)
        if patch is not None and column in patch:
            return patch[column]
        return row.data.get(column)

    def discard(self) -> None:
        self.new_rows = []
        self.pending_changes = {}
        self.last_error = None
        self.saving = False
        self._generation += 1

    async def save(self) -> bool:
        """
        Commit all staged rows and patches.

        Returns True on success. On failure the error message is kept in
        `last_error` and the staged edits stay in place for a retry.
        """
        if self.saving:
            logger.warning("Save already in progress, ignoring")
            return False

        generation = self._generation
        new_rows = list(self.new_rows)
        pending_changes = {row_id: dict(patch) for row_id, patch in self.pending_changes.items()}

        self.saving = True
        self.last_error = None
        try:
            await self.committer.commit(new_rows, pending_changes)

            if generation != self._generation:
                logger.warning("Session was discarded while saving, ignoring result")
                return False

            self.new_rows = []
            self.pending_changes = {}
            logger.info("Changes saved successfully")

            if self.on_success is not None:
                result = self.on_success()
                if inspect.isawaitable(result):
                    await result
            return True
        except TableEditorError as e:
            self._record_failure(generation, e.message)
            return False
        except Exception as e:
            logger.exception(f"Unexpected error while saving changes: {e!r}")
            self._record_failure(generation, "Failed to save changes")
            return False
        finally:
            if generation == self._generation:
                self.saving = False

    def _record_failure(self, generation: int, message: str) -> None:
        if generation != self._generation:
            logger.warning(f"Save of a discarded session failed: {message}")
            return
        logger.error(f"Failed to save changes: {message}")
        self.last_error = message
