"""Auth session model definitions."""

from sqlalchemy import Column, DateTime, String

from portal.database import Base
from portal.models.user import utcnow


class AuthSessionRecord(Base):
    """Server-side record of an issued session token; deleting it revokes the token."""
    __tablename__ = "auth_sessions"

    id = Column(String, primary_key=True)
    # Not a foreign key: SSO identities without a users row still hold a session until rejected.
    user_uid = Column(String, index=True, nullable=False)
    email = Column(String)
    full_name = Column(String)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
