# schoolportal/services/base_service.py
from contextlib import asynccontextmanager
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from schoolportal.services.cache_service import CacheService


class BaseService:
    def __init__(self, db: AsyncSession, cache: Optional[CacheService] = None):
        self.db = db
        self.cache = cache

    @asynccontextmanager
    async def transaction(self):
        """Commit on success, roll back on any error"""
        try:
            yield
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

    async def cached(self, key: str, loader):
        if self.cache is None:
            return await loader()
        return await self.cache.get_or_set(key, loader)

    async def invalidate(self, *keys: str) -> None:
        if self.cache is not None:
            await self.cache.invalidate(*keys)
