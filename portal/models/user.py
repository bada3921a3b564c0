"""User model definitions."""

from datetime import datetime, timezone
from enum import Enum
from typing import assert_never

from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import relationship

from portal.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Role(str, Enum):
    """The four account categories that govern console access."""

    STUDENT = "student"
    ALUMNI = "alumni"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"

    @classmethod
    def from_value(cls, value: str | None) -> "Role | None":
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return None

    @property
    def is_admin_tier(self) -> bool:
        match self:
            case Role.ADMIN | Role.SUPER_ADMIN:
                return True
            case Role.STUDENT | Role.ALUMNI:
                return False
            case _:
                assert_never(self)

    @property
    def label(self) -> str:
        match self:
            case Role.STUDENT:
                return "Student"
            case Role.ALUMNI:
                return "Alumni"
            case Role.ADMIN:
                return "Admin"
            case Role.SUPER_ADMIN:
                return "Super Admin"
            case _:
                assert_never(self)


class User(Base):
    """Represents an account known to the platform."""
    __tablename__ = "users"

    uid = Column(String, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    role = Column(String, nullable=False)  # see Role
    hashed_password = Column(String, nullable=True)
    sso_subject = Column(String, nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    admin_info = relationship("AdminProfile", back_populates="user", cascade="all, delete-orphan", uselist=False)
    alumni_profile = relationship("AlumniProfile", back_populates="user", cascade="all, delete-orphan", uselist=False)
    student_info = relationship("StudentProfile", back_populates="user", cascade="all, delete-orphan", uselist=False)
