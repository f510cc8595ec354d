"""
Content catalog API endpoints - trainings, chapters and questions
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from quizhub.api.deps import get_current_user
from quizhub.database import get_db
from quizhub.exceptions import NotFoundError
from quizhub.models import User
from quizhub.schemas.question import (
    ChapterCreate,
    ChapterOut,
    QuestionCreate,
    QuestionOut,
    QuestionView,
    TrainingCreate,
    TrainingOut,
)
from quizhub.services.catalog_service import AUTHOR_ROLES, catalog_service
from quizhub.services.redaction import question_view


router = APIRouter(prefix="/api", tags=["catalog"])
logger = logging.getLogger(__name__)


@router.post("/trainings", response_model=TrainingOut, status_code=201)
async def create_training(
    request: TrainingCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a training and assign its teachers (admin/manager only)"""
    training = catalog_service.create_training(db, request, current_user)
    return TrainingOut.model_validate(training)


@router.post("/chapters", response_model=ChapterOut, status_code=201)
async def create_chapter(
    request: ChapterCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    chapter = catalog_service.create_chapter(db, request, current_user)
    return ChapterOut.model_validate(chapter)


@router.post("/questions", response_model=QuestionOut, status_code=201)
async def create_question(
    request: QuestionCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Add a question to a chapter

    - multiple_choice: at least two choices, at least one correct
    - true_false: exactly two choices, one correct
    - numeric_formula: correct_answer_formula required
    """
    question = catalog_service.create_question(db, request, current_user)
    return QuestionOut.model_validate(question)


@router.get("/questions/{question_id}")
async def get_question(
    question_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Authors get the full question; everyone else the redacted view"""
    question = catalog_service.find_question_by_id(db, question_id)
    if not question:
        raise NotFoundError("Question not found.")

    if current_user.role in AUTHOR_ROLES:
        return QuestionOut.model_validate(question)
    return QuestionView.model_validate(question_view(question))
