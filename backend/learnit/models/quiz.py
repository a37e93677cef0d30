"""
Quiz model. Questions are stored as a JSON list of
{"question", "options", "correct_answer", "explanation"} objects.
"""

from sqlalchemy import Column, Integer, String, Text, JSON

from learnit.db.base import Base, TimestampMixin


class Quiz(Base, TimestampMixin):
    __tablename__ = "quizzes"

    id = Column(String(50), primary_key=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(100), nullable=False, default="General")
    image_url = Column(String(1000), nullable=True)
    questions = Column(JSON, nullable=False, default=list)
    passing_score = Column(Integer, nullable=False, default=70)
    related_machine_ids = Column(JSON, nullable=False, default=list)
    related_course_id = Column(String(50), nullable=True)
    difficulty = Column(String(50), nullable=False, default="Beginner")

    def __repr__(self) -> str:
        return f"<Quiz(id={self.id}, title={self.title}, questions={len(self.questions or [])})>"
