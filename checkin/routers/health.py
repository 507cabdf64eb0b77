from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from checkin.config import settings
from checkin.database import get_db
from checkin.services.store import classify_store_error

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """
    Simple probe to verify the API server is up.
    """
    return {"status": "ok", "service": settings.PROJECT_NAME}


@router.get("/db", status_code=status.HTTP_200_OK)
async def db_health_check(db: AsyncSession = Depends(get_db)):
    """
    Deep probe to verify the database connection and schema are usable.
    """
    try:
        await db.execute(text("SELECT 1"))
        await db.execute(text("SELECT 1 FROM attendance_log LIMIT 1"))
    except (SQLAlchemyError, OSError) as exc:
        error = classify_store_error(exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Database check failed ({error.kind.value}): {error.message}",
        )
    return {"status": "up", "database": "connected"}
