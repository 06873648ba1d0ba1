from typing import Any, Dict

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolportal.core.database import get_db
from schoolportal.core.dependencies import get_cache, get_staff, get_tenant_session
from schoolportal.schemas.auth import SessionUser
from schoolportal.schemas.records import NewsFeedRequest
from schoolportal.services.cache_service import CacheService
from schoolportal.services.records_service import RecordsService

router = APIRouter(tags=["News Feed"])


def get_records_service(
    db: AsyncSession = Depends(get_db),
    cache: CacheService = Depends(get_cache)
) -> RecordsService:
    return RecordsService(db, cache)


@router.post("/create", status_code=status.HTTP_201_CREATED)
async def create_news_feed(
    request: NewsFeedRequest,
    author: SessionUser = Depends(get_staff),
    records_service: RecordsService = Depends(get_records_service)
) -> Dict[str, Any]:
    feed = await records_service.create_news_feed(author, request)
    return {"message": "News feed created", "newsFeed": feed}


@router.get("/list")
async def list_news_feeds(
    session_user: SessionUser = Depends(get_tenant_session),
    records_service: RecordsService = Depends(get_records_service)
) -> Dict[str, Any]:
    return {"newsFeeds": await records_service.list_news_feeds(session_user.school_id)}


@router.put("/{feed_id}")
async def update_news_feed(
    feed_id: int,
    request: NewsFeedRequest,
    author: SessionUser = Depends(get_staff),
    records_service: RecordsService = Depends(get_records_service)
) -> Dict[str, Any]:
    feed = await records_service.update_news_feed(author, feed_id, request)
    return {"message": "News feed updated", "newsFeed": feed}


@router.delete("/{feed_id}")
async def delete_news_feed(
    feed_id: int,
    author: SessionUser = Depends(get_staff),
    records_service: RecordsService = Depends(get_records_service)
) -> Dict[str, str]:
    await records_service.delete_news_feed(author, feed_id)
    return {"message": "News feed deleted"}
