"""
Quiz CRUD, scoring and the pass -> certification step.

Scoring:
  score = round(100 * correct / total), halves rounded up, so 7/10 is 70
  and 1/8 is 13. The pass mark is QUIZ_PASSING_SCORE unless
  USE_QUIZ_PASSING_SCORE is set, in which case each quiz's own
  passing_score applies.
"""

from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException, status

from learnit.models.machine import Machine
from learnit.models.quiz import Quiz
from learnit.models.user import User
from learnit.schemas.quiz import QuizCreate, QuizUpdate, QuizSubmission, QuizResult
from learnit.services.certification_service import grant_certification
from learnit.services.eligibility import Eligibility
from learnit.services.identifiers import next_numeric_id
from learnit.services.machine_service import get_machine, get_machine_eligibility
from learnit.core.config import get_settings
from learnit.core.logging import get_logger
from learnit.core.metrics import record_quiz_submission

logger = get_logger(__name__)


def score_answers(questions: Sequence[dict], answers: Sequence[int]) -> tuple[int, int, int]:
    """Return (correct, total, score). Answers are matched to questions by position."""
    total = len(questions)
    if total == 0:
        raise ValueError("quiz has no questions")
    if len(answers) != total:
        raise ValueError(f"expected {total} answers, got {len(answers)}")

    correct = sum(
        1 for question, answer in zip(questions, answers)
        if answer == question["correct_answer"]
    )
    # Integer half-up rounding of 100 * correct / total
    score = (200 * correct + total) // (2 * total)
    return correct, total, score


def passing_threshold(quiz: Quiz) -> int:
    settings = get_settings()
    if settings.USE_QUIZ_PASSING_SCORE and quiz.passing_score is not None:
        return quiz.passing_score
    return settings.QUIZ_PASSING_SCORE


async def list_quizzes(db: AsyncSession) -> list[Quiz]:
    result = await db.execute(select(Quiz).order_by(Quiz.id))
    return list(result.scalars().all())


async def get_quiz(db: AsyncSession, quiz_id: str) -> Quiz:
    quiz = await db.get(Quiz, quiz_id)
    if quiz is None and quiz_id.isdigit() and quiz_id != str(int(quiz_id)):
        # "05" and "5" name the same quiz
        quiz = await db.get(Quiz, str(int(quiz_id)))
    if quiz is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quiz not found")
    return quiz


async def create_quiz(db: AsyncSession, data: QuizCreate) -> Quiz:
    payload = data.model_dump()
    quiz = Quiz(id=await next_numeric_id(db, Quiz), **payload)
    db.add(quiz)
    await db.flush()
    await db.refresh(quiz)

    logger.info("quiz_created", quiz_id=quiz.id, questions=len(quiz.questions))
    return quiz


async def update_quiz(db: AsyncSession, quiz_id: str, data: QuizUpdate) -> Quiz:
    quiz = await get_quiz(db, quiz_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(quiz, field, value)

    await db.flush()
    await db.refresh(quiz)
    logger.info("quiz_updated", quiz_id=quiz.id)
    return quiz


async def delete_quiz(db: AsyncSession, quiz_id: str) -> None:
    quiz = await get_quiz(db, quiz_id)
    await db.delete(quiz)
    await db.flush()
    logger.info("quiz_deleted", quiz_id=quiz_id)


async def _target_machine(db: AsyncSession, quiz: Quiz, requested: Optional[str]) -> Optional[Machine]:
    """
    The machine a pass certifies: the requested one, which must be among the
    quiz's related machines, else the first related machine.
    """
    related = quiz.related_machine_ids or []
    if requested:
        if requested not in related:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="This quiz does not certify that machine",
            )
        return await get_machine(db, requested)
    if not related:
        return None
    return await db.get(Machine, related[0])


async def submit_quiz(
    db: AsyncSession,
    user: User,
    quiz_id: str,
    submission: QuizSubmission,
) -> QuizResult:
    """
    Score a submission and, on a pass, certify the user for the quiz's
    machine. A failed attempt changes nothing; retries are unlimited.

    The quiz only counts once the user has reached it: the target machine
    must be at quiz_required (safety certification held, linked course
    completed) or already certified. Anything earlier is a 403.
    """
    quiz = await get_quiz(db, quiz_id)
    user_id = user.id

    if not quiz.questions:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Quiz has no questions",
        )

    machine = await _target_machine(db, quiz, submission.machine_id)
    machine_id = machine.id if machine is not None else None
    if machine is not None:
        eligibility = await get_machine_eligibility(db, user, machine)
        if eligibility not in (Eligibility.QUIZ_REQUIRED, Eligibility.CERTIFIED):
            logger.warning(
                "quiz_rejected_ineligible",
                quiz_id=quiz_id,
                user_id=user_id,
                machine_id=machine_id,
                eligibility=eligibility.value,
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Complete the earlier steps for this machine first ({eligibility.value})",
            )

    try:
        correct, total, score = score_answers(quiz.questions, submission.answers)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )

    threshold = passing_threshold(quiz)
    passed = score >= threshold
    record_quiz_submission(passed)

    created = False
    if passed and machine_id:
        # A lost grant race rolls the session back; only plain values below
        _, created = await grant_certification(db, user_id, machine_id, score=score)

    logger.info(
        "quiz_submitted",
        quiz_id=quiz_id,
        user_id=user_id,
        score=score,
        threshold=threshold,
        passed=passed,
        machine_id=machine_id,
        certification_created=created,
    )
    return QuizResult(
        quiz_id=quiz_id,
        score=score,
        correct=correct,
        total=total,
        passing_score=threshold,
        passed=passed,
        machine_id=machine_id,
        certification_granted=passed and machine_id is not None,
    )
