from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from checkin.cache_config import get_cache
from checkin.database import get_db
from checkin.services.sql_store import SqlAlchemyStore
from checkin.services.store import RecordStore


async def get_store(db: AsyncSession = Depends(get_db)) -> RecordStore:
    return SqlAlchemyStore(db)


__all__ = ["get_cache", "get_db", "get_store"]
