from typing import Any, Dict, FrozenSet, List, Mapping, Optional

from sqlalchemy import select

from schoolportal.core.errors import (
    InvalidTransitionError,
    NotFoundError,
    PermissionDenied,
    ValidationError
)
from schoolportal.core.logging import logger
from schoolportal.core.permissions import student_scope
from schoolportal.models import Appointment, ChatMessage, Student, User
from schoolportal.schemas.auth import SessionUser
from schoolportal.schemas.communication import (
    AppointmentCreateRequest,
    AppointmentResponse,
    ChatMessageResponse,
    MessageCreateRequest
)
from schoolportal.schemas.enums import AppointmentStatus, UserRole
from schoolportal.services.base_service import BaseService
from schoolportal.services.cache_service import CacheKeys

# Allowed status changes. REJECTED and COMPLETED are terminal.
APPOINTMENT_TRANSITIONS: Mapping[AppointmentStatus, FrozenSet[AppointmentStatus]] = {
    AppointmentStatus.PENDING: frozenset({AppointmentStatus.APPROVED, AppointmentStatus.REJECTED}),
    AppointmentStatus.APPROVED: frozenset({AppointmentStatus.COMPLETED}),
    AppointmentStatus.REJECTED: frozenset(),
    AppointmentStatus.COMPLETED: frozenset(),
}


def can_transition(current: AppointmentStatus, target: AppointmentStatus) -> bool:
    return target in APPOINTMENT_TRANSITIONS.get(current, frozenset())


def is_participant(session_user: SessionUser, appointment: Appointment) -> bool:
    if session_user.role == UserRole.STUDENT:
        return session_user.student_id is not None and appointment.student_id == session_user.student_id
    if session_user.role == UserRole.TEACHER:
        return appointment.teacher_id == session_user.user_id
    return False


class AppointmentService(BaseService):
    """
    Student to teacher appointments and the chat that hangs off them.

    A student books a teacher (PENDING). The teacher approves or rejects it;
    an approved appointment opens its chat until the teacher completes it.
    """

    async def get_appointment(self, appointment_id: int, school_id: int) -> Appointment:
        result = await self.db.execute(
            select(Appointment)
            .where(Appointment.id == appointment_id, Appointment.school_id == school_id)
            .execution_options(populate_existing=True)
        )
        appointment = result.scalar_one_or_none()
        if not appointment:
            raise NotFoundError("Appointment not found")
        return appointment

    async def get_participant_appointment(self, session_user: SessionUser, appointment_id: int) -> Appointment:
        """The appointment if the caller takes part in it; 404 before 403"""
        appointment = await self.get_appointment(appointment_id, session_user.school_id)
        if not is_participant(session_user, appointment):
            raise PermissionDenied("You are not part of this appointment")
        return appointment

    async def get_chat_appointment(self, session_user: SessionUser, appointment_id: int) -> Appointment:
        """Participant check, then the chat gate: only APPROVED appointments talk"""
        appointment = await self.get_participant_appointment(session_user, appointment_id)
        if appointment.status != AppointmentStatus.APPROVED:
            raise ValidationError("Chat is only available for approved appointments")
        return appointment

    async def _student_user_id(self, student_id: int) -> Optional[int]:
        result = await self.db.execute(select(Student.user_id).where(Student.id == student_id))
        return result.scalar_one_or_none()

    async def _invalidate_lists(self, appointment: Appointment) -> None:
        keys = [CacheKeys.appointments(UserRole.TEACHER.value, appointment.teacher_id)]
        student_user_id = await self._student_user_id(appointment.student_id)
        if student_user_id is not None:
            keys.append(CacheKeys.appointments(UserRole.STUDENT.value, student_user_id))
        await self.invalidate(*keys)

    async def create_appointment(self, student: SessionUser, data: AppointmentCreateRequest) -> Dict[str, Any]:
        student_id = student_scope(student)
        if data.teacher_id is None:
            raise ValidationError("teacherId is required")

        teacher = await self.db.execute(
            select(User.id).where(
                User.id == data.teacher_id,
                User.school_id == student.school_id,
                User.role == UserRole.TEACHER
            )
        )
        if teacher.scalar_one_or_none() is None:
            raise NotFoundError("Teacher not found")

        appointment = Appointment(
            school_id=student.school_id,
            student_id=student_id,
            teacher_id=data.teacher_id,
            status=AppointmentStatus.PENDING,
            note=data.note,
            scheduled_at=data.scheduled_at
        )
        async with self.transaction():
            self.db.add(appointment)

        await self._invalidate_lists(appointment)
        logger.info(
            f"Appointment {appointment.id} requested by student {student_id} with teacher {data.teacher_id}",
            extra={"school_id": student.school_id, "user_id": student.user_id}
        )
        appointment = await self.get_appointment(appointment.id, student.school_id)
        return AppointmentResponse.model_validate(appointment).to_json_dict()

    async def list_appointments(self, session_user: SessionUser) -> List[Dict[str, Any]]:
        if session_user.role == UserRole.STUDENT:
            condition = Appointment.student_id == student_scope(session_user)
        elif session_user.role == UserRole.TEACHER:
            condition = Appointment.teacher_id == session_user.user_id
        else:
            raise PermissionDenied("Only students and teachers have appointments")

        async def load():
            result = await self.db.execute(
                select(Appointment)
                .where(condition, Appointment.school_id == session_user.school_id)
                .order_by(Appointment.created_at.desc(), Appointment.id.desc())
            )
            return [AppointmentResponse.model_validate(a).to_json_dict() for a in result.scalars().all()]

        return await self.cached(
            CacheKeys.appointments(session_user.role.value, session_user.user_id),
            load
        )

    async def transition(
        self,
        teacher: SessionUser,
        appointment_id: int,
        target: AppointmentStatus
    ) -> Dict[str, Any]:
        appointment = await self.get_appointment(appointment_id, teacher.school_id)
        if appointment.teacher_id != teacher.user_id:
            raise PermissionDenied("Only the appointment's teacher can change its status")

        current = appointment.status
        if not can_transition(current, target):
            raise InvalidTransitionError(current.value, target.value, entity="Appointment")

        async with self.transaction():
            appointment.status = target

        await self._invalidate_lists(appointment)
        logger.info(
            f"Appointment {appointment_id} moved {current.value} -> {target.value}",
            extra={"school_id": teacher.school_id, "user_id": teacher.user_id}
        )
        appointment = await self.get_appointment(appointment_id, teacher.school_id)
        return AppointmentResponse.model_validate(appointment).to_json_dict()

    async def approve(self, teacher: SessionUser, appointment_id: int) -> Dict[str, Any]:
        return await self.transition(teacher, appointment_id, AppointmentStatus.APPROVED)

    async def reject(self, teacher: SessionUser, appointment_id: int) -> Dict[str, Any]:
        return await self.transition(teacher, appointment_id, AppointmentStatus.REJECTED)

    async def complete(self, teacher: SessionUser, appointment_id: int) -> Dict[str, Any]:
        return await self.transition(teacher, appointment_id, AppointmentStatus.COMPLETED)

    async def list_messages(self, session_user: SessionUser, appointment_id: int) -> List[Dict[str, Any]]:
        await self.get_participant_appointment(session_user, appointment_id)

        async def load():
            result = await self.db.execute(
                select(ChatMessage)
                .where(ChatMessage.appointment_id == appointment_id)
                .order_by(ChatMessage.created_at.asc(), ChatMessage.id.asc())
            )
            return [ChatMessageResponse.model_validate(m).to_json_dict() for m in result.scalars().all()]

        return await self.cached(CacheKeys.messages(appointment_id), load)

    async def post_message(self, session_user: SessionUser, data: MessageCreateRequest) -> Dict[str, Any]:
        if data.appointment_id is None or not data.content:
            raise ValidationError("appointmentId and content are required")

        appointment = await self.get_chat_appointment(session_user, data.appointment_id)

        message = ChatMessage(
            appointment_id=appointment.id,
            sender_id=session_user.user_id,
            content=data.content
        )
        async with self.transaction():
            self.db.add(message)

        await self.invalidate(CacheKeys.messages(appointment.id))
        result = await self.db.execute(
            select(ChatMessage)
            .where(ChatMessage.id == message.id)
            .execution_options(populate_existing=True)
        )
        return ChatMessageResponse.model_validate(result.scalar_one()).to_json_dict()
