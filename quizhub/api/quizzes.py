"""
Quiz definition API endpoints
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from quizhub.api.deps import Pagination, get_current_user
from quizhub.database import get_db
from quizhub.models import User
from quizhub.models.enums import QuizType
from quizhub.schemas.quiz import (
    DeleteResponse,
    PublishRequest,
    QuizCreate,
    QuizDetailResponse,
    QuizResponse,
    QuizUpdate,
)
from quizhub.services.mapper_service import mapper_service
from quizhub.services.quiz_service import quiz_service
from quizhub.utils.ids import parse_id


router = APIRouter(prefix="/api/quizzes", tags=["quizzes"])
logger = logging.getLogger(__name__)


@router.post("", response_model=QuizResponse, status_code=201)
async def create_quiz(
    request: QuizCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Create a quiz

    - method "select": explicit questions, score defaults to 1
    - method "generate": random draw from chapters (optionally by difficulty)
    - Students may only create revision quizzes; teachers cannot create revision quizzes
    - Quizzes start unpublished
    """
    quiz = quiz_service.create_quiz(db, request, current_user.id)
    return mapper_service.quiz_response(quiz)


@router.get("", response_model=List[QuizResponse])
async def list_quizzes(
    training_id: Optional[str] = Query(None),
    quiz_type: Optional[QuizType] = Query(None),
    is_published: Optional[bool] = Query(None),
    pagination: Pagination = Depends(),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List quizzes visible to the caller's role"""
    filters = {}
    if training_id:
        filters["training_id"] = parse_id(training_id, "training ID")
    if quiz_type:
        filters["quiz_type"] = quiz_type.value
    if is_published is not None:
        filters["is_published"] = is_published

    quizzes = quiz_service.list_quizzes(
        db, current_user, filters, page=pagination.page, limit=pagination.limit
    )
    return [mapper_service.quiz_response(quiz) for quiz in quizzes]


@router.get("/{quiz_id}", response_model=QuizDetailResponse)
async def get_quiz(
    quiz_id: str,
    include_questions: bool = Query(False),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Quiz definition; answer keys are only included for its creator, admins and managers"""
    return quiz_service.get_quiz(db, quiz_id, current_user, include_questions)


@router.patch("/{quiz_id}", response_model=QuizResponse)
async def update_quiz(
    quiz_id: str,
    request: QuizUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    quiz = quiz_service.update_quiz(db, quiz_id, request, current_user)
    return mapper_service.quiz_response(quiz)


@router.post("/{quiz_id}/publish", response_model=QuizResponse)
async def publish_quiz(
    quiz_id: str,
    request: PublishRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Publish or unpublish a quiz (revision quizzes cannot be published)"""
    quiz = quiz_service.publish_quiz(db, quiz_id, request.publish, current_user)
    return mapper_service.quiz_response(quiz)


@router.delete("/{quiz_id}", response_model=DeleteResponse)
async def delete_quiz(
    quiz_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return quiz_service.delete_quiz(db, quiz_id, current_user)
