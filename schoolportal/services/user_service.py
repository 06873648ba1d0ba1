from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from schoolportal.core.errors import ConflictError, NotFoundError, PermissionDenied, ValidationError
from schoolportal.core.logging import logger
from schoolportal.core.permissions import can_create_role
from schoolportal.core.security import get_password_hash
from schoolportal.models import Student, User
from schoolportal.schemas.auth import SessionUser
from schoolportal.schemas.enums import UserRole
from schoolportal.schemas.user import SignupRequest, TeacherResponse
from schoolportal.services.base_service import BaseService
from schoolportal.services.cache_service import CacheKeys


class UserService(BaseService):

    async def email_exists(self, email: str) -> bool:
        result = await self.db.execute(select(User.id).where(User.email == email.lower()))
        return result.scalar_one_or_none() is not None

    async def signup(self, creator: SessionUser, data: SignupRequest) -> User:
        """
        Create a login for another user.

        Super admins create school admins (who get a school later); school
        admins create teachers and students inside their own school.
        """
        if not can_create_role(creator.role, data.role):
            raise PermissionDenied(
                f"{creator.role.value} cannot create {data.role.value} accounts"
            )

        school_id: Optional[int] = None
        if creator.role == UserRole.SCHOOLADMIN:
            if creator.school_id is None:
                raise ValidationError("Create your school before adding users")
            school_id = creator.school_id

        if await self.email_exists(data.email):
            raise ConflictError("A user with this email already exists")

        user = User(
            name=data.name.strip(),
            email=data.email.lower(),
            mobile=data.mobile,
            password_hash=get_password_hash(data.password),
            role=data.role,
            school_id=school_id,
            created_by_id=creator.user_id,
            is_active=True
        )
        try:
            async with self.transaction():
                self.db.add(user)
                await self.db.flush()
                if data.role == UserRole.STUDENT:
                    self.db.add(Student(user_id=user.id, school_id=school_id))
        except IntegrityError:
            raise ConflictError("A user with this email already exists")

        if school_id is not None:
            if data.role == UserRole.TEACHER:
                await self.invalidate(CacheKeys.teachers(school_id))
            else:
                await self.invalidate(CacheKeys.students(school_id))

        logger.info(
            f"User {user.id} ({data.role.value}) created by {creator.user_id}",
            extra={"user_id": user.id, "school_id": school_id}
        )
        return await self.get_user(user.id)

    async def get_user(self, user_id: int) -> User:
        result = await self.db.execute(
            select(User)
            .where(User.id == user_id)
            .execution_options(populate_existing=True)
        )
        user = result.scalar_one_or_none()
        if not user:
            raise NotFoundError("User not found")
        return user

    async def list_teachers(self, school_id: int) -> List[Dict[str, Any]]:
        async def load():
            result = await self.db.execute(
                select(User)
                .where(
                    User.school_id == school_id,
                    User.role == UserRole.TEACHER,
                    User.is_active.is_(True)
                )
                .order_by(User.name.asc(), User.id.asc())
            )
            return [TeacherResponse.model_validate(t).to_json_dict() for t in result.scalars().all()]

        return await self.cached(CacheKeys.teachers(school_id), load)
