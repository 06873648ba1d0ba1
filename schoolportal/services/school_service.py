from typing import Any, Dict, Optional

from sqlalchemy import select, update

from schoolportal.core.errors import NotFoundError, ValidationError
from schoolportal.core.logging import logger
from schoolportal.models import School, User
from schoolportal.schemas.auth import SessionUser
from schoolportal.schemas.school import SchoolCreateRequest, SchoolResponse, SchoolUpdateRequest
from schoolportal.services.base_service import BaseService
from schoolportal.services.cache_service import CacheKeys


class SchoolService(BaseService):

    async def get_school_by_id(self, school_id: int) -> Optional[School]:
        result = await self.db.execute(
            select(School)
            .where(School.id == school_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def create_school(self, admin: SessionUser, data: SchoolCreateRequest) -> School:
        """A school admin creates the school they will administer"""
        owned = await self.db.execute(select(School.id).where(School.admin_id == admin.user_id))
        if admin.school_id is not None or owned.scalars().first() is not None:
            raise ValidationError("You already manage a school")

        school = School(
            name=data.name.strip(),
            address=data.address,
            location=data.location,
            admin_id=admin.user_id
        )
        async with self.transaction():
            self.db.add(school)
            await self.db.flush()
            await self.db.execute(
                update(User).where(User.id == admin.user_id).values(school_id=school.id)
            )

        logger.info(
            f"School {school.id} created by admin {admin.user_id}",
            extra={"school_id": school.id, "user_id": admin.user_id}
        )
        return await self.get_school_by_id(school.id)

    async def update_school(self, school_id: int, data: SchoolUpdateRequest) -> School:
        school = await self.get_school_by_id(school_id)
        if not school:
            raise NotFoundError("School not found")

        update_dict = data.model_dump(exclude_unset=True)
        if not update_dict:
            raise ValidationError("Nothing to update")

        async with self.transaction():
            for field, value in update_dict.items():
                setattr(school, field, value.strip() if isinstance(value, str) else value)

        await self.invalidate(CacheKeys.school(school_id))
        return await self.get_school_by_id(school_id)

    async def get_my_school(self, school_id: int) -> Optional[Dict[str, Any]]:
        async def load():
            school = await self.get_school_by_id(school_id)
            return SchoolResponse.model_validate(school).to_json_dict() if school else None

        return await self.cached(CacheKeys.school(school_id), load)
