from typing import Any, Dict, FrozenSet, List, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from schoolportal.core.errors import InvalidTransitionError, NotFoundError
from schoolportal.core.logging import logger
from schoolportal.models import LeaveRequest
from schoolportal.schemas.auth import SessionUser
from schoolportal.schemas.enums import LeaveStatus
from schoolportal.schemas.leave import (
    LeaveApplyRequest,
    LeaveDecisionRequest,
    LeaveDetailResponse,
    LeaveResponse
)
from schoolportal.services.base_service import BaseService
from schoolportal.services.cache_service import CacheKeys

# A decision is final; only pending requests move.
LEAVE_TRANSITIONS: Mapping[LeaveStatus, FrozenSet[LeaveStatus]] = {
    LeaveStatus.PENDING: frozenset({LeaveStatus.APPROVED, LeaveStatus.REJECTED}),
    LeaveStatus.APPROVED: frozenset(),
    LeaveStatus.REJECTED: frozenset(),
}


class LeaveService(BaseService):

    def _detail_query(self):
        return select(LeaveRequest).options(
            selectinload(LeaveRequest.teacher),
            selectinload(LeaveRequest.approver)
        )

    async def _get_leave(self, leave_id: int, school_id: int) -> LeaveRequest:
        result = await self.db.execute(
            self._detail_query()
            .where(LeaveRequest.id == leave_id, LeaveRequest.school_id == school_id)
            .execution_options(populate_existing=True)
        )
        leave = result.scalar_one_or_none()
        if not leave:
            raise NotFoundError("Leave request not found")
        return leave

    async def _invalidate(self, school_id: int, teacher_id: int) -> None:
        await self.invalidate(
            CacheKeys.leaves(school_id),
            CacheKeys.pending_leaves(school_id),
            CacheKeys.my_leaves(school_id, teacher_id)
        )

    async def apply(self, teacher: SessionUser, data: LeaveApplyRequest) -> Dict[str, Any]:
        leave = LeaveRequest(
            school_id=teacher.school_id,
            teacher_id=teacher.user_id,
            leave_type=data.leave_type,
            from_date=data.from_date,
            to_date=data.to_date,
            reason=data.reason,
            status=LeaveStatus.PENDING
        )
        async with self.transaction():
            self.db.add(leave)

        await self._invalidate(teacher.school_id, teacher.user_id)
        logger.info(
            f"Leave {leave.id} ({data.leave_type.value}) requested for {data.from_date} to {data.to_date}",
            extra={"school_id": teacher.school_id, "user_id": teacher.user_id}
        )
        return LeaveResponse.model_validate(
            await self._get_leave(leave.id, teacher.school_id)
        ).to_json_dict()

    async def my_leaves(self, teacher: SessionUser) -> List[Dict[str, Any]]:
        async def load():
            result = await self.db.execute(
                select(LeaveRequest)
                .where(
                    LeaveRequest.school_id == teacher.school_id,
                    LeaveRequest.teacher_id == teacher.user_id
                )
                .order_by(LeaveRequest.created_at.desc(), LeaveRequest.id.desc())
            )
            return [LeaveResponse.model_validate(l).to_json_dict() for l in result.scalars().all()]

        return await self.cached(CacheKeys.my_leaves(teacher.school_id, teacher.user_id), load)

    async def all_leaves(self, school_id: int) -> List[Dict[str, Any]]:
        async def load():
            result = await self.db.execute(
                self._detail_query()
                .where(LeaveRequest.school_id == school_id)
                .order_by(LeaveRequest.created_at.desc(), LeaveRequest.id.desc())
            )
            return [LeaveDetailResponse.model_validate(l).to_json_dict() for l in result.scalars().all()]

        return await self.cached(CacheKeys.leaves(school_id), load)

    async def pending_leaves(self, school_id: int) -> List[Dict[str, Any]]:
        async def load():
            result = await self.db.execute(
                self._detail_query()
                .where(
                    LeaveRequest.school_id == school_id,
                    LeaveRequest.status == LeaveStatus.PENDING
                )
                .order_by(LeaveRequest.created_at.asc(), LeaveRequest.id.asc())
            )
            return [LeaveDetailResponse.model_validate(l).to_json_dict() for l in result.scalars().all()]

        return await self.cached(CacheKeys.pending_leaves(school_id), load)

    async def decide(
        self,
        admin: SessionUser,
        leave_id: int,
        target: LeaveStatus,
        data: Optional[LeaveDecisionRequest] = None
    ) -> Dict[str, Any]:
        leave = await self._get_leave(leave_id, admin.school_id)
        current = leave.status
        if target not in LEAVE_TRANSITIONS.get(current, frozenset()):
            raise InvalidTransitionError(current.value, target.value, entity="Leave request")

        async with self.transaction():
            leave.status = target
            leave.approver_id = admin.user_id
            if data is not None and data.remarks is not None:
                leave.remarks = data.remarks

        await self._invalidate(admin.school_id, leave.teacher_id)
        logger.info(
            f"Leave {leave_id} moved {current.value} -> {target.value}",
            extra={"school_id": admin.school_id, "user_id": admin.user_id}
        )
        return LeaveDetailResponse.model_validate(
            await self._get_leave(leave_id, admin.school_id)
        ).to_json_dict()
