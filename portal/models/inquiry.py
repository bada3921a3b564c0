"""Inquiry model definitions."""

from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text

from portal.database import Base
from portal.models.user import utcnow


class InquiryStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    COMPLETED = "completed"

    @classmethod
    def from_value(cls, value: str | None) -> "InquiryStatus | None":
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return None


class Inquiry(Base):
    """A mentorship request sent by a student to an alumnus."""
    __tablename__ = "inquiries"

    inquiry_id = Column(Integer, primary_key=True)
    student_uid = Column(String, ForeignKey("users.uid", ondelete="CASCADE"), index=True)
    alumni_uid = Column(String, ForeignKey("users.uid", ondelete="CASCADE"), index=True)
    subject_area = Column(String)
    message = Column(Text)
    status = Column(String, default=InquiryStatus.PENDING.value)  # see InquiryStatus
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=True)
