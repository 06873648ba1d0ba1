from sqlalchemy import Column, Integer, Date, ForeignKey, DateTime, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from .base import TenantModel
from schoolportal.schemas.enums import AttendanceStatus


class Attendance(TenantModel):
    """One row per student, day and period"""
    __tablename__ = "attendances"
    __table_args__ = (
        UniqueConstraint("student_id", "date", "period", name="uq_attendance_student_date_period"),
    )

    id = Column(Integer, primary_key=True, index=True)
    class_id = Column(Integer, ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    marked_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    date = Column(Date, nullable=False)
    period = Column(Integer, nullable=False, default=1)
    status = Column(Enum(AttendanceStatus), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    student = relationship("Student")
    student_class = relationship("Class")

    def __repr__(self):
        return f"<Attendance(student_id={self.student_id}, date={self.date}, period={self.period}, status={self.status})>"
