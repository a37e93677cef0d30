"""
Certification: a (user, machine) grant with the score that earned it.
The unique constraint makes granting idempotent.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint, func

from learnit.db.base import Base


class Certification(Base):
    __tablename__ = "certifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    machine_id = Column(
        String(50), ForeignKey("machines.id", ondelete="CASCADE"), nullable=False, index=True
    )
    score = Column(Integer, nullable=True)
    issued_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("user_id", "machine_id", name="uq_user_machine_certification"),
    )

    def __repr__(self) -> str:
        return f"<Certification(user={self.user_id}, machine={self.machine_id})>"
