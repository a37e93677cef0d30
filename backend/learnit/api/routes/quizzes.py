"""
Quiz endpoints. Public reads strip correct answers and explanations;
scoring happens server-side on submit.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from learnit.core.security import get_current_user, require_admin
from learnit.db.session import get_db
from learnit.models.user import User
from learnit.schemas.quiz import (
    QuizCreate,
    QuizPublicResponse,
    QuizResponse,
    QuizResult,
    QuizSubmission,
    QuizUpdate,
)
from learnit.schemas.user import MessageResponse
from learnit.services import quiz_service

router = APIRouter(prefix="/quizzes", tags=["Quizzes"])


@router.get("", response_model=list[QuizPublicResponse])
async def list_quizzes(db: AsyncSession = Depends(get_db)):
    return await quiz_service.list_quizzes(db)


@router.get("/{quiz_id}", response_model=QuizPublicResponse)
async def get_quiz(quiz_id: str, db: AsyncSession = Depends(get_db)):
    return await quiz_service.get_quiz(db, quiz_id)


@router.get("/{quiz_id}/full", response_model=QuizResponse)
async def get_quiz_with_answers(
    quiz_id: str,
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await quiz_service.get_quiz(db, quiz_id)


@router.post("", response_model=QuizResponse, status_code=status.HTTP_201_CREATED)
async def create_quiz(
    data: QuizCreate,
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await quiz_service.create_quiz(db, data)


@router.put("/{quiz_id}", response_model=QuizResponse)
async def update_quiz(
    quiz_id: str,
    data: QuizUpdate,
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await quiz_service.update_quiz(db, quiz_id, data)


@router.delete("/{quiz_id}", response_model=MessageResponse)
async def delete_quiz(
    quiz_id: str,
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await quiz_service.delete_quiz(db, quiz_id)
    return MessageResponse(message="Quiz removed")


@router.post("/{quiz_id}/submit", response_model=QuizResult)
async def submit_quiz(
    quiz_id: str,
    submission: QuizSubmission,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Score the answers. A pass certifies the user for the quiz's machine
    (or the machine_id in the body); a fail changes nothing.
    """
    return await quiz_service.submit_quiz(db, user, quiz_id, submission)
