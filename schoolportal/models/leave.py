from sqlalchemy import Column, Integer, Date, Text, ForeignKey, DateTime, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from .base import TenantModel
from schoolportal.schemas.enums import LeaveStatus, LeaveType


class LeaveRequest(TenantModel):
    __tablename__ = "leave_requests"

    id = Column(Integer, primary_key=True, index=True)
    teacher_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    approver_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    leave_type = Column(Enum(LeaveType), nullable=False)
    reason = Column(Text, nullable=True)
    from_date = Column(Date, nullable=False)
    to_date = Column(Date, nullable=False)
    status = Column(Enum(LeaveStatus), nullable=False, default=LeaveStatus.PENDING)
    remarks = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    teacher = relationship("User", foreign_keys=[teacher_id])
    approver = relationship("User", foreign_keys=[approver_id])

    def __repr__(self):
        return f"<LeaveRequest(id={self.id}, teacher_id={self.teacher_id}, status={self.status})>"
