"""
User database model.

Users are created on first sign-in through the identity provider;
their role drives every authorization decision.
"""

from sqlalchemy import Column, Integer, String, DateTime, Enum
from sqlalchemy.sql import func
from zapshift.app.db.session import Base
from zapshift.app.models.enums import UserRole


class User(Base):
    """
    User model for role resolution.

    Credentials live with the identity provider; only the verified email
    and the role granted inside this system are stored here.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(100), nullable=True)

    role = Column(Enum(UserRole), default=UserRole.USER, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    last_login_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role.value}')>"
