from typing import Optional

from sqlalchemy import select, update

from schoolportal.core.logging import log_function_call, logger
from schoolportal.models import School, User
from schoolportal.schemas.auth import SessionUser
from schoolportal.schemas.enums import UserRole
from schoolportal.services.base_service import BaseService


class TenantService(BaseService):
    """Resolves which school a caller acts for"""

    async def find_admin_school_id(self, user_id: int) -> Optional[int]:
        result = await self.db.execute(
            select(School.id).where(School.admin_id == user_id).order_by(School.id)
        )
        return result.scalars().first()

    @log_function_call(logger)
    async def repair_school_assignment(self, session_user: SessionUser) -> Optional[int]:
        """
        Give a school admin whose user row lost ``school_id`` the school they own.

        Idempotent: when the user row already carries a school id, or when the
        admin owns no school, nothing is written.
        """
        if session_user.school_id is not None or session_user.role != UserRole.SCHOOLADMIN:
            return session_user.school_id

        school_id = await self.find_admin_school_id(session_user.user_id)
        if school_id is None:
            return None

        async with self.transaction():
            await self.db.execute(
                update(User)
                .where(User.id == session_user.user_id, User.school_id.is_(None))
                .values(school_id=school_id)
            )
        logger.info(
            f"Repaired school assignment for admin {session_user.user_id}",
            extra={"user_id": session_user.user_id, "school_id": school_id}
        )
        return school_id

    async def resolve_school_id(self, session_user: SessionUser) -> Optional[int]:
        if session_user.school_id is not None:
            return session_user.school_id
        return await self.repair_school_assignment(session_user)
