"""Alumni profile model definitions."""

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from portal.database import Base
from portal.models.user import utcnow


class AlumniProfile(Base):
    """A graduate's self-submitted profile awaiting or holding verification."""
    __tablename__ = "alumni_profile"

    id = Column(Integer, primary_key=True)
    user_uid = Column(String, ForeignKey("users.uid", ondelete="CASCADE"), unique=True, index=True, nullable=False)
    full_name = Column(String)
    course_code = Column(String)
    graduation_year = Column(Integer)
    cgpa = Column(String)
    capstone_title = Column(String)
    capstone_description = Column(Text)
    capstone_supervisor = Column(String)
    career_timeline = Column(JSON, default=list)
    internship_history = Column(JSON, default=list)
    skills = Column(JSON, default=list)
    expertise_areas = Column(JSON, default=list)
    bio = Column(Text)
    is_verified = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    user = relationship("User", back_populates="alumni_profile")
