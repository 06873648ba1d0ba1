from typing import Any, Dict, List, Optional

from sqlalchemy import and_, func, select, update
from sqlalchemy.orm import selectinload

from schoolportal.core.errors import ConflictError, NotFoundError, ValidationError
from schoolportal.core.logging import logger
from schoolportal.models import Class, Student, User
from schoolportal.schemas.enums import UserRole
from schoolportal.schemas.school import ClassCreateRequest, ClassResponse
from schoolportal.schemas.student import StudentResponse
from schoolportal.services.base_service import BaseService
from schoolportal.services.cache_service import CacheKeys


class ClassService(BaseService):

    async def get_class(self, class_id: int, school_id: int) -> Class:
        """Class of this school, or 404 for missing and foreign ids alike"""
        result = await self.db.execute(
            select(Class)
            .options(selectinload(Class.teacher))
            .where(Class.id == class_id, Class.school_id == school_id)
            .execution_options(populate_existing=True)
        )
        class_ = result.scalar_one_or_none()
        if not class_:
            raise NotFoundError("Class not found")
        return class_

    async def validate_class_name(self, school_id: int, name: str, section: Optional[str]) -> None:
        """Name and section are unique within a school"""
        query = select(Class.id).where(
            and_(
                Class.school_id == school_id,
                Class.name == name,
                Class.section == section if section is not None else Class.section.is_(None)
            )
        )
        existing = await self.db.execute(query)
        if existing.scalar_one_or_none() is not None:
            label = f"{name} {section}" if section else name
            raise ConflictError(f"Class '{label}' already exists in this school")

    async def _validate_teacher(self, teacher_id: int, school_id: int) -> None:
        result = await self.db.execute(
            select(User.id).where(
                User.id == teacher_id,
                User.school_id == school_id,
                User.role == UserRole.TEACHER
            )
        )
        if result.scalar_one_or_none() is None:
            raise NotFoundError("Teacher not found")

    def _to_response(self, class_: Class, student_count: int) -> Dict[str, Any]:
        payload = ClassResponse.model_validate(class_).model_copy(
            update={"student_count": student_count}
        )
        return payload.to_json_dict()

    async def create_class(self, school_id: int, data: ClassCreateRequest) -> Dict[str, Any]:
        name = data.name.strip()
        section = data.section.strip() if data.section else None
        await self.validate_class_name(school_id, name, section)
        if data.teacher_id is not None:
            await self._validate_teacher(data.teacher_id, school_id)

        class_ = Class(school_id=school_id, name=name, section=section, teacher_id=data.teacher_id)
        async with self.transaction():
            self.db.add(class_)

        await self.invalidate(CacheKeys.classes(school_id))
        logger.info(f"Class {class_.id} created", extra={"school_id": school_id})
        return self._to_response(await self.get_class(class_.id, school_id), 0)

    async def list_classes(self, school_id: int) -> List[Dict[str, Any]]:
        async def load():
            counts = (
                select(Student.class_id, func.count(Student.id).label("student_count"))
                .where(Student.school_id == school_id)
                .group_by(Student.class_id)
                .subquery()
            )
            result = await self.db.execute(
                select(Class, func.coalesce(counts.c.student_count, 0))
                .outerjoin(counts, counts.c.class_id == Class.id)
                .options(selectinload(Class.teacher))
                .where(Class.school_id == school_id)
                .order_by(Class.created_at.desc(), Class.id.desc())
            )
            return [self._to_response(class_, count) for class_, count in result.all()]

        return await self.cached(CacheKeys.classes(school_id), load)

    async def list_class_students(self, school_id: int, class_id: int) -> List[Dict[str, Any]]:
        await self.get_class(class_id, school_id)

        async def load():
            result = await self.db.execute(
                select(Student)
                .options(selectinload(Student.user), selectinload(Student.student_class))
                .where(Student.school_id == school_id, Student.class_id == class_id)
                .order_by(Student.id.asc())
            )
            return [StudentResponse.model_validate(s).to_json_dict() for s in result.scalars().all()]

        return await self.cached(CacheKeys.class_students(school_id, class_id), load)

    async def assign_students(self, school_id: int, class_id: int, student_ids: List[int]) -> int:
        """Move students of this school into a class. Returns how many moved."""
        await self.get_class(class_id, school_id)
        wanted = set(student_ids)

        result = await self.db.execute(
            select(Student.id).where(Student.id.in_(wanted), Student.school_id == school_id)
        )
        found = set(result.scalars().all())
        missing = wanted - found
        if missing:
            raise ValidationError(
                "Some students do not belong to this school",
                details={"student_ids": sorted(missing)}
            )

        async with self.transaction():
            await self.db.execute(
                update(Student)
                .where(Student.id.in_(found), Student.school_id == school_id)
                .values(class_id=class_id)
            )

        await self.invalidate(
            CacheKeys.classes(school_id),
            CacheKeys.students(school_id),
            CacheKeys.class_students_pattern(school_id)
        )
        logger.info(
            f"Assigned {len(found)} students to class {class_id}",
            extra={"school_id": school_id}
        )
        return len(found)
