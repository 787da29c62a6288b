class TableEditorError(Exception):
    """Base error carrying a user-visible message"""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidFieldValue(TableEditorError):
    """A staged value could not be coerced into its submission form"""

    status_code = 422

    def __init__(self, column: str, message: str | None = None):
        super().__init__(message or f"Invalid JSON for field: {column}")
        self.column = column


class RequestFailed(TableEditorError):
    """The table rows API rejected a request or could not be reached"""

    status_code = 502


class PartialBulkFailure(TableEditorError):
    status_code = 502

    def __init__(self, failed: int, total: int, first_error: str):
        succeeded = total - failed
        message = f"Failed to delete {failed} of {total} row(s)"
        if succeeded > 0:
            message += f" ({succeeded} deleted successfully)"
        message += f". {first_error}"
        super().__init__(message)
        self.failed = failed
        self.total = total
        self.succeeded = succeeded
        self.first_error = first_error


class SessionNotFound(TableEditorError):
    status_code = 404

    def __init__(self, session_id: str):
        super().__init__(f"Editing session not found: {session_id}")
        self.session_id = session_id
