from fastapi import APIRouter

from table_editor._config import config


router = APIRouter()


@router.get("/probe")
async def probe() -> dict[str, str]:
    return {"status": "ok", "environment": config.ENVIRONMENT}
