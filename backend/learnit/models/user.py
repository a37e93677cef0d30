"""
User model with bcrypt password storage.

Certifications and bookings are separate tables keyed by user_id rather
than arrays on the user row, so grants are idempotent and bookings can be
constrained per slot.
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime

from learnit.db.base import Base, TimestampMixin


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, default="User")
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    is_admin = Column(Boolean, default=False, nullable=False)
    last_login = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, admin={self.is_admin})>"
