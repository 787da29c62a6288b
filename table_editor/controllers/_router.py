# mypy: ignore-errors

from fastapi import APIRouter

from table_editor.controllers import session_controller, table_controller

from . import probe


router = APIRouter()

router.include_router(probe.router, tags=["probe"])
router.include_router(session_controller.router)
router.include_router(table_controller.router)
