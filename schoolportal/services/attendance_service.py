from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy import and_, select

from schoolportal.core.errors import NotFoundError, ValidationError
from schoolportal.core.logging import logger
from schoolportal.models import Attendance, Class, Student
from schoolportal.schemas.attendance import AttendanceMarkRequest, AttendanceResponse
from schoolportal.schemas.auth import SessionUser
from schoolportal.services.base_service import BaseService
from schoolportal.services.cache_service import CacheKeys


class AttendanceService(BaseService):

    async def mark_attendance(self, teacher: SessionUser, data: AttendanceMarkRequest) -> int:
        """
        Record attendance for one class period. A second submission for the same
        student, date and period overwrites the earlier status.
        """
        school_id = teacher.school_id
        class_exists = await self.db.execute(
            select(Class.id).where(Class.id == data.class_id, Class.school_id == school_id)
        )
        if class_exists.scalar_one_or_none() is None:
            raise NotFoundError("Class not found")

        student_ids = [entry.student_id for entry in data.attendances]
        result = await self.db.execute(
            select(Student.id).where(
                Student.id.in_(student_ids),
                Student.school_id == school_id,
                Student.class_id == data.class_id
            )
        )
        found = set(result.scalars().all())
        missing = sorted(set(student_ids) - found)
        if missing:
            raise ValidationError(
                "Some students are not enrolled in this class",
                details={"student_ids": missing}
            )

        existing_result = await self.db.execute(
            select(Attendance).where(
                and_(
                    Attendance.student_id.in_(student_ids),
                    Attendance.date == data.date,
                    Attendance.period == data.period
                )
            )
        )
        existing = {row.student_id: row for row in existing_result.scalars().all()}

        async with self.transaction():
            for entry in data.attendances:
                record = existing.get(entry.student_id)
                if record:
                    record.status = entry.status
                    record.marked_by_id = teacher.user_id
                else:
                    self.db.add(Attendance(
                        school_id=school_id,
                        class_id=data.class_id,
                        student_id=entry.student_id,
                        marked_by_id=teacher.user_id,
                        date=data.date,
                        period=data.period,
                        status=entry.status
                    ))

        await self.invalidate(CacheKeys.attendance_pattern(school_id))
        logger.info(
            f"Attendance marked for class {data.class_id} on {data.date} period {data.period}: "
            f"{len(data.attendances)} students ({len(existing)} updated)",
            extra={"school_id": school_id, "user_id": teacher.user_id}
        )
        return len(data.attendances)

    async def list_attendance(
        self,
        school_id: int,
        class_id: Optional[int] = None,
        on_date: Optional[date] = None,
        student_id: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        scope = ":".join(
            str(value) if value is not None else "all"
            for value in (class_id, on_date, student_id)
        )

        async def load():
            query = select(Attendance).where(Attendance.school_id == school_id)
            if class_id is not None:
                query = query.where(Attendance.class_id == class_id)
            if on_date is not None:
                query = query.where(Attendance.date == on_date)
            if student_id is not None:
                query = query.where(Attendance.student_id == student_id)
            result = await self.db.execute(
                query.order_by(
                    Attendance.date.desc(),
                    Attendance.period.asc(),
                    Attendance.student_id.asc()
                )
            )
            return [AttendanceResponse.model_validate(a).to_json_dict() for a in result.scalars().all()]

        return await self.cached(CacheKeys.attendance(school_id, scope), load)
