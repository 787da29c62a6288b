from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from table_editor.commons.exceptions import TableEditorError
from table_editor.libs.log import get_logger


logger = get_logger(__name__)


async def table_editor_error_handler(
    request: Request,
    exc: TableEditorError,
) -> JSONResponse:
    logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TableEditorError, table_editor_error_handler)
