import secrets
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from schoolportal.core.errors import ConflictError, NotFoundError
from schoolportal.core.logging import log_function_call, logger
from schoolportal.core.security import get_password_hash
from schoolportal.models import Class, Student, StudentHistory, User
from schoolportal.schemas.auth import SessionUser
from schoolportal.schemas.enums import UserRole
from schoolportal.schemas.student import (
    StudentCreateRequest,
    StudentHistoryResponse,
    StudentResponse
)
from schoolportal.services.base_service import BaseService
from schoolportal.services.cache_service import CacheKeys

PLACEHOLDER_EMAIL_DOMAIN = "schoolportal.app"


class StudentService(BaseService):

    async def get_student(self, student_id: int, school_id: int) -> Student:
        result = await self.db.execute(
            select(Student)
            .options(
                selectinload(Student.user),
                selectinload(Student.student_class),
                selectinload(Student.fee)
            )
            .where(Student.id == student_id, Student.school_id == school_id)
            .execution_options(populate_existing=True)
        )
        student = result.scalar_one_or_none()
        if not student:
            raise NotFoundError("Student not found")
        return student

    async def _ensure_class(self, class_id: int, school_id: int) -> None:
        result = await self.db.execute(
            select(Class.id).where(Class.id == class_id, Class.school_id == school_id)
        )
        if result.scalar_one_or_none() is None:
            raise NotFoundError("Class not found")

    async def create_student(
        self,
        admin: SessionUser,
        data: StudentCreateRequest
    ) -> Tuple[Student, Optional[str]]:
        """
        Create the login and the student profile together.

        Returns the student and, when the admin did not choose a password,
        the generated temporary one so it can be handed to the student.
        """
        school_id = admin.school_id
        if data.class_id is not None:
            await self._ensure_class(data.class_id, school_id)

        email = (data.email or f"student.{secrets.token_hex(4)}@school{school_id}.{PLACEHOLDER_EMAIL_DOMAIN}").lower()
        existing = await self.db.execute(select(User.id).where(User.email == email))
        if existing.scalar_one_or_none() is not None:
            raise ConflictError("A user with this email already exists")

        temporary_password = None if data.password else secrets.token_urlsafe(9)
        user = User(
            name=data.name.strip(),
            email=email,
            mobile=data.phone_no,
            password_hash=get_password_hash(data.password or temporary_password),
            role=UserRole.STUDENT,
            school_id=school_id,
            created_by_id=admin.user_id,
            is_active=True
        )
        try:
            async with self.transaction():
                self.db.add(user)
                await self.db.flush()
                student = Student(
                    user_id=user.id,
                    school_id=school_id,
                    class_id=data.class_id,
                    father_name=data.father_name.strip(),
                    aadhaar_no=data.aadhaar_no,
                    phone_no=data.phone_no,
                    dob=data.dob,
                    address=data.address
                )
                self.db.add(student)
        except IntegrityError:
            raise ConflictError("A user with this email already exists")

        await self.invalidate(
            CacheKeys.students(school_id),
            CacheKeys.classes(school_id),
            CacheKeys.class_students_pattern(school_id)
        )
        logger.info(
            f"Student {student.id} created by admin {admin.user_id}",
            extra={"school_id": school_id, "user_id": admin.user_id}
        )
        return await self.get_student(student.id, school_id), temporary_password

    async def list_students(self, school_id: int) -> List[Dict[str, Any]]:
        async def load():
            result = await self.db.execute(
                select(Student)
                .options(selectinload(Student.user), selectinload(Student.student_class))
                .where(Student.school_id == school_id)
                .order_by(Student.created_at.desc(), Student.id.desc())
            )
            return [StudentResponse.model_validate(s).to_json_dict() for s in result.scalars().all()]

        return await self.cached(CacheKeys.students(school_id), load)

    @log_function_call(logger)
    async def deactivate_student(
        self,
        admin: SessionUser,
        student_id: int,
        reason: Optional[str] = None
    ) -> StudentHistory:
        """
        Snapshot the student into history, disable the login and remove the
        profile. Records hanging off the profile go with it.
        """
        school_id = admin.school_id
        student = await self.get_student(student_id, school_id)
        user = student.user

        history = StudentHistory(
            school_id=school_id,
            original_student_id=student.id,
            user_id=student.user_id,
            name=user.name if user else "Unknown",
            email=user.email if user else None,
            class_name=student.student_class.name if student.student_class else None,
            father_name=student.father_name,
            reason=reason,
            deactivated_by_id=admin.user_id
        )
        async with self.transaction():
            self.db.add(history)
            if user:
                user.is_active = False
            await self.db.delete(student)

        await self.invalidate(
            CacheKeys.students(school_id),
            CacheKeys.classes(school_id),
            CacheKeys.fees(student_id),
            CacheKeys.class_students_pattern(school_id),
            CacheKeys.student_histories_pattern(school_id),
            CacheKeys.attendance_pattern(school_id),
            CacheKeys.marks_pattern(school_id),
            CacheKeys.certificates_pattern(school_id)
        )
        logger.info(
            f"Student {student_id} deactivated by admin {admin.user_id}",
            extra={"school_id": school_id, "user_id": admin.user_id}
        )
        result = await self.db.execute(
            select(StudentHistory)
            .where(StudentHistory.id == history.id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def list_histories(
        self,
        school_id: int,
        original_student_id: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        async def load():
            query = select(StudentHistory).where(StudentHistory.school_id == school_id)
            if original_student_id is not None:
                query = query.where(StudentHistory.original_student_id == original_student_id)
            result = await self.db.execute(
                query.order_by(StudentHistory.deactivated_at.desc(), StudentHistory.id.desc())
            )
            return [
                StudentHistoryResponse.model_validate(h).to_json_dict()
                for h in result.scalars().all()
            ]

        return await self.cached(CacheKeys.student_histories(school_id, original_student_id), load)
