"""Student profile model definitions."""

from sqlalchemy import Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from portal.database import Base


class StudentProfile(Base):
    """Represents a current student's academic record."""
    __tablename__ = "student_info"

    id = Column(Integer, primary_key=True)
    user_uid = Column(String, ForeignKey("users.uid", ondelete="CASCADE"), unique=True, index=True, nullable=False)
    student_id = Column(String)
    full_name = Column(String)
    course_code = Column(String)

    user = relationship("User", back_populates="student_info")
