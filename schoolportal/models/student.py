from sqlalchemy import Column, Integer, String, Date, ForeignKey, DateTime, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from .base import TenantModel


class Student(TenantModel):
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete="CASCADE"), unique=True, nullable=False)
    class_id = Column(Integer, ForeignKey('classes.id', ondelete="SET NULL"), nullable=True, index=True)

    father_name = Column(String(255), nullable=True)
    aadhaar_no = Column(String(20), nullable=True)
    phone_no = Column(String(20), nullable=True)
    dob = Column(Date, nullable=True)
    address = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", back_populates="student_profile")
    school = relationship("School", back_populates="students")
    student_class = relationship("Class", back_populates="students")
    fee = relationship("StudentFee", back_populates="student", uselist=False, cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Student(id={self.id}, user_id={self.user_id}, school_id={self.school_id})>"


class StudentHistory(TenantModel):
    """Snapshot of a student taken when the profile is deactivated"""
    __tablename__ = "student_histories"

    id = Column(Integer, primary_key=True, index=True)
    original_student_id = Column(Integer, nullable=False, index=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete="SET NULL"), nullable=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    class_name = Column(String(255), nullable=True)
    father_name = Column(String(255), nullable=True)
    reason = Column(Text, nullable=True)
    deactivated_by_id = Column(Integer, ForeignKey('users.id', ondelete="SET NULL"), nullable=True)
    deactivated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<StudentHistory(original_student_id={self.original_student_id}, name={self.name})>"
