"""
Pydantic schemas for quizzes and quiz submissions.

Public reads use QuizPublicResponse, which drops the answer key.
"""

from typing import Optional
from pydantic import BaseModel, Field, model_validator


class QuizQuestion(BaseModel):
    question: str = Field(..., min_length=1)
    options: list[str] = Field(..., min_length=2)
    correct_answer: int = Field(..., ge=0)
    explanation: Optional[str] = None

    @model_validator(mode="after")
    def answer_in_range(self):
        if not self.question.strip():
            raise ValueError("All questions must have content")
        if self.correct_answer >= len(self.options):
            raise ValueError("Each question must have a valid correct answer")
        return self


class QuizCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    category: str = "General"
    image_url: Optional[str] = None
    questions: list[QuizQuestion] = []
    passing_score: int = Field(70, ge=0, le=100)
    related_machine_ids: list[str] = []
    related_course_id: Optional[str] = None
    difficulty: str = "Beginner"


class QuizUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = None
    image_url: Optional[str] = None
    questions: Optional[list[QuizQuestion]] = None
    passing_score: Optional[int] = Field(None, ge=0, le=100)
    related_machine_ids: Optional[list[str]] = None
    related_course_id: Optional[str] = None
    difficulty: Optional[str] = None


class QuizResponse(BaseModel):
    id: str
    title: str
    description: str
    category: str
    image_url: Optional[str]
    questions: list[QuizQuestion]
    passing_score: int
    related_machine_ids: list[str]
    related_course_id: Optional[str]
    difficulty: str

    model_config = {"from_attributes": True}


class PublicQuestion(BaseModel):
    question: str
    options: list[str]


class QuizPublicResponse(BaseModel):
    id: str
    title: str
    description: str
    category: str
    image_url: Optional[str]
    questions: list[PublicQuestion]
    passing_score: int
    related_machine_ids: list[str]
    related_course_id: Optional[str]
    difficulty: str

    model_config = {"from_attributes": True}


class QuizSubmission(BaseModel):
    answers: list[int]
    machine_id: Optional[str] = None


class QuizResult(BaseModel):
    quiz_id: str
    score: int
    correct: int
    total: int
    passing_score: int
    passed: bool
    machine_id: Optional[str] = None
    certification_granted: bool = False
