import asyncio
from typing import Any

from table_editor.commons.exceptions import PartialBulkFailure
from table_editor.libs.log import get_logger
from table_editor.schemas.table_schemas import (
    ColumnDefinition,
    CommitResult,
    DeleteResult,
    TempRow,
)
from table_editor.services.table_client import TableClient
from table_editor.services.value_coder import clean_patch, clean_row_data


logger = get_logger(__name__)


class BatchCommitter:
    """Applies staged rows and patches of one table to the table rows API"""

    def __init__(
        self,
        client: TableClient,
        table_id: str,
        columns: list[ColumnDefinition],
    ):
        self.client = client
        self.table_id = table_id
        self.columns = columns

    async def commit(
        self,
        new_rows: list[TempRow],
        pending_changes: dict[str, dict[str, Any]],
    ) -> CommitResult:
        """
        Create every staged row, then update every patched row.

        Requests are sent one at a time in the given order. The first failure
        aborts the commit; rows written before it stay written.
        """
        logger.info(
            f"Committing table {self.table_id}: "
            f"{len(new_rows)} new, {len(pending_changes)} updated",
        )

        for row in new_rows:
            data = clean_row_data(self.columns, row.data)
            await self.client.create_row(self.table_id, data)
            logger.debug(f"Created row from {row.temp_id}")

        for row_id, patch in pending_changes.items():
            data = clean_patch(self.columns, patch)
            await self.client.update_row(self.table_id, row_id, data)
            logger.debug(f"Updated row {row_id}")

        return CommitResult(
            created_rows=len(new_rows),
            updated_rows=len(pending_changes),
        )

    async def delete_rows(self, row_ids: list[str]) -> DeleteResult:
        """
        Delete rows concurrently and wait for every request to settle.

        Raises PartialBulkFailure when any delete failed; the rows whose
        delete succeeded stay deleted.
        """
        if not row_ids:
            return DeleteResult(deleted_rows=0)

        if len(row_ids) == 1:
            await self.client.delete_row(self.table_id, row_ids[0])
            logger.info(f"Deleted row {row_ids[0]}")
            return DeleteResult(deleted_rows=1)

        results = await asyncio.gather(
            *(
                self.client.delete_row(
                    self.table_id,
                    row_id,
                    fallback_error=f"Failed to delete row {row_id}",
                )
                for row_id in row_ids
            ),
            return_exceptions=True,
        )

        failures = [result for result in results if isinstance(result, BaseException)]
        for failure in failures:
            if not isinstance(failure, Exception):
                raise failure

        if failures:
            first_error = str(failures[0]) or "Unknown error"
            raise PartialBulkFailure(len(failures), len(row_ids), first_error)

        logger.info(f"Deleted {len(row_ids)} rows")
        return DeleteResult(deleted_rows=len(row_ids))
