"""
Safety/machine course content and per-user completion records.
"""

from sqlalchemy import Column, Integer, String, Text, JSON, DateTime, ForeignKey, UniqueConstraint, func

from learnit.db.base import Base, TimestampMixin


class Course(Base, TimestampMixin):
    __tablename__ = "courses"

    id = Column(String(50), primary_key=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(100), nullable=False, default="General")
    content = Column(Text, nullable=False, default="")
    image_url = Column(String(1000), nullable=True)
    related_machine_ids = Column(JSON, nullable=False, default=list)
    quiz_id = Column(String(50), nullable=True)
    difficulty = Column(String(50), nullable=False, default="Beginner")

    def __repr__(self) -> str:
        return f"<Course(id={self.id}, title={self.title})>"


class CourseCompletion(Base):
    __tablename__ = "course_completions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    course_id = Column(String(50), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_user_course_completion"),
    )
