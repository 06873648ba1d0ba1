from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from schoolportal.core.errors import NotFoundError
from schoolportal.core.logging import logger
from schoolportal.models import Certificate, NewsFeed, Student, StudentFee
from schoolportal.schemas.auth import SessionUser
from schoolportal.schemas.records import (
    CertificateCreateRequest,
    CertificateResponse,
    NewsFeedRequest,
    NewsFeedResponse
)
from schoolportal.schemas.student import FeeResponse, FeeSetRequest
from schoolportal.services.base_service import BaseService
from schoolportal.services.cache_service import CacheKeys


class RecordsService(BaseService):
    """News feed posts, certificates and fee records"""

    # News feed
    async def _get_news_feed(self, feed_id: int, school_id: int) -> NewsFeed:
        result = await self.db.execute(
            select(NewsFeed)
            .options(selectinload(NewsFeed.created_by))
            .where(NewsFeed.id == feed_id, NewsFeed.school_id == school_id)
            .execution_options(populate_existing=True)
        )
        feed = result.scalar_one_or_none()
        if not feed:
            raise NotFoundError("News feed not found")
        return feed

    async def create_news_feed(self, author: SessionUser, data: NewsFeedRequest) -> Dict[str, Any]:
        feed = NewsFeed(
            school_id=author.school_id,
            created_by_id=author.user_id,
            title=data.title.strip(),
            description=data.description,
            media_url=data.media_url,
            media_type=data.media_type
        )
        async with self.transaction():
            self.db.add(feed)

        await self.invalidate(CacheKeys.news_feeds(author.school_id))
        return NewsFeedResponse.model_validate(
            await self._get_news_feed(feed.id, author.school_id)
        ).to_json_dict()

    async def update_news_feed(self, author: SessionUser, feed_id: int, data: NewsFeedRequest) -> Dict[str, Any]:
        feed = await self._get_news_feed(feed_id, author.school_id)
        async with self.transaction():
            feed.title = data.title.strip()
            feed.description = data.description
            feed.media_url = data.media_url
            feed.media_type = data.media_type

        await self.invalidate(CacheKeys.news_feeds(author.school_id))
        return NewsFeedResponse.model_validate(
            await self._get_news_feed(feed_id, author.school_id)
        ).to_json_dict()

    async def delete_news_feed(self, author: SessionUser, feed_id: int) -> None:
        feed = await self._get_news_feed(feed_id, author.school_id)
        async with self.transaction():
            await self.db.delete(feed)

        await self.invalidate(CacheKeys.news_feeds(author.school_id))
        logger.info(
            f"News feed {feed_id} deleted",
            extra={"school_id": author.school_id, "user_id": author.user_id}
        )

    async def list_news_feeds(self, school_id: int) -> List[Dict[str, Any]]:
        async def load():
            result = await self.db.execute(
                select(NewsFeed)
                .options(selectinload(NewsFeed.created_by))
                .where(NewsFeed.school_id == school_id)
                .order_by(NewsFeed.created_at.desc(), NewsFeed.id.desc())
            )
            return [NewsFeedResponse.model_validate(f).to_json_dict() for f in result.scalars().all()]

        return await self.cached(CacheKeys.news_feeds(school_id), load)

    # Certificates
    def _certificate_query(self):
        return select(Certificate).options(
            selectinload(Certificate.student).selectinload(Student.user),
            selectinload(Certificate.issued_by)
        )

    async def create_certificate(self, issuer: SessionUser, data: CertificateCreateRequest) -> Dict[str, Any]:
        school_id = issuer.school_id
        owner = await self.db.execute(
            select(Student.id).where(Student.id == data.student_id, Student.school_id == school_id)
        )
        if owner.scalar_one_or_none() is None:
            raise NotFoundError("Student not found")

        certificate = Certificate(
            school_id=school_id,
            student_id=data.student_id,
            issued_by_id=issuer.user_id,
            title=data.title.strip(),
            description=data.description,
            certificate_type=data.certificate_type
        )
        async with self.transaction():
            self.db.add(certificate)

        await self.invalidate(CacheKeys.certificates_pattern(school_id))
        logger.info(
            f"Certificate {certificate.id} issued to student {data.student_id}",
            extra={"school_id": school_id, "user_id": issuer.user_id}
        )
        result = await self.db.execute(
            self._certificate_query()
            .where(Certificate.id == certificate.id)
            .execution_options(populate_existing=True)
        )
        return CertificateResponse.model_validate(result.scalar_one()).to_json_dict()

    async def list_certificates(self, school_id: int, student_id: Optional[int] = None) -> List[Dict[str, Any]]:
        async def load():
            query = self._certificate_query().where(Certificate.school_id == school_id)
            if student_id is not None:
                query = query.where(Certificate.student_id == student_id)
            result = await self.db.execute(
                query.order_by(Certificate.issued_date.desc(), Certificate.id.desc())
            )
            return [CertificateResponse.model_validate(c).to_json_dict() for c in result.scalars().all()]

        return await self.cached(CacheKeys.certificates(school_id, student_id), load)

    # Fees
    async def _get_fee(self, student_id: int) -> Optional[StudentFee]:
        result = await self.db.execute(
            select(StudentFee)
            .where(StudentFee.student_id == student_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def set_fee(self, admin: SessionUser, data: FeeSetRequest) -> Dict[str, Any]:
        """Create or replace the fee record of one student"""
        school_id = admin.school_id
        owner = await self.db.execute(
            select(Student.id).where(Student.id == data.student_id, Student.school_id == school_id)
        )
        if owner.scalar_one_or_none() is None:
            raise NotFoundError("Student not found")

        fee = await self._get_fee(data.student_id)
        async with self.transaction():
            if fee is None:
                fee = StudentFee(school_id=school_id, student_id=data.student_id)
                self.db.add(fee)
            fee.total_amount = data.total_amount
            fee.paid_amount = data.paid_amount
            fee.due_date = data.due_date

        await self.invalidate(CacheKeys.fees(data.student_id))
        return FeeResponse.model_validate(await self._get_fee(data.student_id)).to_json_dict()

    async def get_fee(self, student_id: int) -> Dict[str, Any]:
        async def load():
            fee = await self._get_fee(student_id)
            return FeeResponse.model_validate(fee).to_json_dict() if fee else None

        payload = await self.cached(CacheKeys.fees(student_id), load)
        if payload is None:
            raise NotFoundError("Fee record not found")
        return payload
