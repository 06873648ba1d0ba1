from sqlalchemy import Column, Integer, String, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from .base import TenantModel


class Class(TenantModel):
    __tablename__ = "classes"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)  # e.g., "Grade 11"
    section = Column(String(20), nullable=True)
    teacher_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    school = relationship("School", back_populates="classes")
    teacher = relationship("User")
    students = relationship("Student", back_populates="student_class")

    def __repr__(self):
        # Access __dict__ directly to avoid loading attributes
        name = self.__dict__.get('name', '<detached>')
        school_id = self.__dict__.get('school_id', '<detached>')
        return f"<Class(name={name}, school_id={school_id})>"
