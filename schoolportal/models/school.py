from sqlalchemy import Column, String, Integer, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from .base import Base


class School(Base):
    """
    School model. This is the root of the tenant hierarchy: every
    tenant-scoped row carries a school_id pointing here.
    """
    __tablename__ = "schools"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    address = Column(String(255), nullable=True)
    location = Column(String(255), nullable=True)

    # Owning school admin, used to repair admins whose user row lost school_id
    admin_id = Column(Integer, ForeignKey("users.id", use_alter=True, ondelete="SET NULL"), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    admin = relationship("User", foreign_keys=[admin_id], post_update=True)
    users = relationship(
        "User",
        back_populates="school",
        foreign_keys="User.school_id",
        passive_deletes=True,
        lazy='select'
    )
    classes = relationship(
        "Class",
        back_populates="school",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy='select'
    )
    students = relationship(
        "Student",
        back_populates="school",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy='select'
    )

    def __repr__(self):
        return f"<School(id={self.id}, name={self.name})>"
