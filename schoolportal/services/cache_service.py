# schoolportal/services/cache_service.py
import json
from typing import Any, Awaitable, Callable, Optional

from redis import asyncio as aioredis
from redis.exceptions import RedisError

from schoolportal.core.config import settings
from schoolportal.core.logging import logger


class CacheKeys:
    """Key builders for every cached read. Format: ``entity:tenant[:filter]``"""

    @staticmethod
    def school(school_id: int) -> str:
        return f"school:{school_id}"

    @staticmethod
    def students(school_id: int) -> str:
        return f"students:{school_id}"

    @staticmethod
    def teachers(school_id: int) -> str:
        return f"teachers:{school_id}"

    @staticmethod
    def classes(school_id: int) -> str:
        return f"classes:{school_id}"

    @staticmethod
    def class_students(school_id: int, class_id: int) -> str:
        return f"classStudents:{school_id}:{class_id}"

    @staticmethod
    def attendance(school_id: int, scope: str) -> str:
        return f"attendance:{school_id}:{scope}"

    @staticmethod
    def marks(school_id: int, scope: str) -> str:
        return f"marks:{school_id}:{scope}"

    @staticmethod
    def homeworks(school_id: int, scope: str) -> str:
        return f"homeworks:{school_id}:{scope}"

    @staticmethod
    def news_feeds(school_id: int) -> str:
        return f"newsFeeds:{school_id}"

    @staticmethod
    def certificates(school_id: int, student_id: Optional[int]) -> str:
        return f"certificates:{school_id}:{student_id if student_id is not None else 'all'}"

    @staticmethod
    def fees(student_id: int) -> str:
        return f"fees:{student_id}"

    @staticmethod
    def student_histories(school_id: int, original_student_id: Optional[int]) -> str:
        suffix = original_student_id if original_student_id is not None else "all"
        return f"studentHistories:{school_id}:{suffix}"

    @staticmethod
    def appointments(role: str, user_id: int) -> str:
        return f"appointments:{role}:{user_id}"

    @staticmethod
    def messages(appointment_id: int) -> str:
        return f"messages:{appointment_id}"

    @staticmethod
    def leaves(school_id: int) -> str:
        return f"leaves:{school_id}"

    @staticmethod
    def pending_leaves(school_id: int) -> str:
        return f"leaves:pending:{school_id}"

    @staticmethod
    def my_leaves(school_id: int, teacher_id: int) -> str:
        return f"leaves:mine:{school_id}:{teacher_id}"

    # Invalidation patterns covering every filter of a per-tenant key
    @staticmethod
    def class_students_pattern(school_id: int) -> str:
        return f"classStudents:{school_id}:*"

    @staticmethod
    def attendance_pattern(school_id: int) -> str:
        return CacheKeys.attendance(school_id, "*")

    @staticmethod
    def marks_pattern(school_id: int) -> str:
        return CacheKeys.marks(school_id, "*")

    @staticmethod
    def homeworks_pattern(school_id: int) -> str:
        return CacheKeys.homeworks(school_id, "*")

    @staticmethod
    def certificates_pattern(school_id: int) -> str:
        return f"certificates:{school_id}:*"

    @staticmethod
    def student_histories_pattern(school_id: int) -> str:
        return f"studentHistories:{school_id}:*"


class CacheService:
    """
    Cache-aside accessor over Redis.

    ``get_or_set`` looks a key up and returns the decoded JSON value on a hit.
    On a miss it awaits the loader, stores its JSON-serialisable result with a
    fixed expiry and returns it. Writers call ``invalidate`` with the keys or
    ``prefix:*`` patterns their mutation touches.

    Redis is best-effort: connection or command failures are logged and the
    loader result is served directly.
    """

    def __init__(self, redis: aioredis.Redis, ttl_seconds: Optional[int] = None):
        self.redis = redis
        self.ttl_seconds = ttl_seconds or settings.CACHE_TTL_SECONDS

    async def get(self, key: str) -> Optional[Any]:
        try:
            raw = await self.redis.get(key)
        except RedisError as e:
            logger.warning(f"Cache read failed for {key}: {str(e)}", extra={"cache_key": key})
            return None
        if raw is None:
            return None
        return json.loads(raw)

    async def set(self, key: str, value: Any) -> None:
        try:
            await self.redis.set(key, json.dumps(value), ex=self.ttl_seconds)
        except RedisError as e:
            logger.warning(f"Cache write failed for {key}: {str(e)}", extra={"cache_key": key})

    async def get_or_set(self, key: str, loader: Callable[[], Awaitable[Any]]) -> Any:
        cached = await self.get(key)
        if cached is not None:
            logger.debug(f"Cache hit: {key}", extra={"cache_key": key})
            return cached

        logger.debug(f"Cache miss: {key}", extra={"cache_key": key})
        value = await loader()
        if value is not None:
            await self.set(key, value)
        return value

    async def invalidate(self, *keys: str) -> None:
        """Delete exact keys and any ``*`` pattern matches"""
        exact = [key for key in keys if "*" not in key]
        patterns = [key for key in keys if "*" in key]
        try:
            for pattern in patterns:
                async for matched in self.redis.scan_iter(match=pattern):
                    exact.append(matched)
            if exact:
                await self.redis.delete(*exact)
                logger.debug(f"Cache invalidated: {', '.join(map(str, exact))}")
        except RedisError as e:
            logger.warning(f"Cache invalidation failed for {keys}: {str(e)}")
