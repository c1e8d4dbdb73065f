from fastapi import APIRouter
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from campuschat.core.database import engine

router = APIRouter(tags=["root"])

@router.get("/health", response_class=PlainTextResponse)
async def health():
    return "OK"

@router.get("/api/health")
async def api_health():
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        return JSONResponse(status_code=503, content={"status": "unhealthy", "error": type(exc).__name__})
    return {"status": "healthy", "database": "connected"}
