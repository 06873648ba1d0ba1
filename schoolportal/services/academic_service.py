from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from schoolportal.core.errors import NotFoundError
from schoolportal.core.logging import logger
from schoolportal.models import Class, Homework, Mark, Student
from schoolportal.schemas.academics import (
    HomeworkCreateRequest,
    HomeworkResponse,
    MarkCreateRequest,
    MarkResponse
)
from schoolportal.schemas.auth import SessionUser
from schoolportal.services.base_service import BaseService
from schoolportal.services.cache_service import CacheKeys


class AcademicService(BaseService):
    """Marks and homework"""

    async def _ensure_class(self, class_id: int, school_id: int) -> None:
        result = await self.db.execute(
            select(Class.id).where(Class.id == class_id, Class.school_id == school_id)
        )
        if result.scalar_one_or_none() is None:
            raise NotFoundError("Class not found")

    async def _ensure_student(self, student_id: int, school_id: int) -> None:
        result = await self.db.execute(
            select(Student.id).where(Student.id == student_id, Student.school_id == school_id)
        )
        if result.scalar_one_or_none() is None:
            raise NotFoundError("Student not found")

    async def create_mark(self, teacher: SessionUser, data: MarkCreateRequest) -> Dict[str, Any]:
        school_id = teacher.school_id
        await self._ensure_class(data.class_id, school_id)
        await self._ensure_student(data.student_id, school_id)

        mark = Mark(
            school_id=school_id,
            class_id=data.class_id,
            student_id=data.student_id,
            teacher_id=teacher.user_id,
            subject=data.subject.strip(),
            marks=data.marks,
            total_marks=data.total_marks,
            suggestions=data.suggestions
        )
        async with self.transaction():
            self.db.add(mark)

        await self.invalidate(CacheKeys.marks_pattern(school_id))
        logger.info(
            f"Mark {mark.id} recorded for student {data.student_id}",
            extra={"school_id": school_id, "user_id": teacher.user_id}
        )
        result = await self.db.execute(
            select(Mark).where(Mark.id == mark.id).execution_options(populate_existing=True)
        )
        return MarkResponse.model_validate(result.scalar_one()).to_json_dict()

    async def list_marks(self, school_id: int, student_id: Optional[int] = None) -> List[Dict[str, Any]]:
        async def load():
            query = select(Mark).where(Mark.school_id == school_id)
            if student_id is not None:
                query = query.where(Mark.student_id == student_id)
            result = await self.db.execute(query.order_by(Mark.created_at.desc(), Mark.id.desc()))
            return [MarkResponse.model_validate(m).to_json_dict() for m in result.scalars().all()]

        scope = str(student_id) if student_id is not None else "all"
        return await self.cached(CacheKeys.marks(school_id, scope), load)

    async def create_homework(self, teacher: SessionUser, data: HomeworkCreateRequest) -> Dict[str, Any]:
        school_id = teacher.school_id
        await self._ensure_class(data.class_id, school_id)

        homework = Homework(
            school_id=school_id,
            class_id=data.class_id,
            teacher_id=teacher.user_id,
            title=data.title.strip(),
            description=data.description,
            subject=data.subject,
            due_date=data.due_date
        )
        async with self.transaction():
            self.db.add(homework)

        await self.invalidate(CacheKeys.homeworks_pattern(school_id))
        result = await self.db.execute(
            select(Homework)
            .options(selectinload(Homework.homework_class), selectinload(Homework.teacher))
            .where(Homework.id == homework.id)
            .execution_options(populate_existing=True)
        )
        return HomeworkResponse.model_validate(result.scalar_one()).to_json_dict()

    async def student_class_id(self, student_id: int) -> Optional[int]:
        result = await self.db.execute(select(Student.class_id).where(Student.id == student_id))
        return result.scalar_one_or_none()

    async def list_homeworks(self, school_id: int, class_id: Optional[int] = None) -> List[Dict[str, Any]]:
        async def load():
            query = (
                select(Homework)
                .options(selectinload(Homework.homework_class), selectinload(Homework.teacher))
                .where(Homework.school_id == school_id)
            )
            if class_id is not None:
                query = query.where(Homework.class_id == class_id)
            result = await self.db.execute(query.order_by(Homework.created_at.desc(), Homework.id.desc()))
            return [HomeworkResponse.model_validate(h).to_json_dict() for h in result.scalars().all()]

        scope = str(class_id) if class_id is not None else "all"
        return await self.cached(CacheKeys.homeworks(school_id, scope), load)
