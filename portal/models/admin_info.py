"""Admin profile model definitions."""

from sqlalchemy import Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from portal.database import Base


class AdminProfile(Base):
    """Staff details for an account holding the admin or super_admin role."""
    __tablename__ = "admin_info"

    id = Column(Integer, primary_key=True)
    user_uid = Column(String, ForeignKey("users.uid", ondelete="CASCADE"), unique=True, index=True, nullable=False)
    staff_id = Column(String)
    full_name = Column(String)
    department = Column(String)

    user = relationship("User", back_populates="admin_info")
