"""
Public (guest) quiz API endpoints - no X-User-Id required
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Any, Dict, List, Optional
import logging

from quizhub.api.deps import Pagination
from quizhub.database import get_db
from quizhub.schemas.quiz import PublicQuizResponse
from quizhub.schemas.session import GuestSessionStart, GuestSessionSubmission, QuizSessionResponse
from quizhub.services.mapper_service import mapper_service
from quizhub.services.quiz_service import quiz_service
from quizhub.services.quiz_session_service import quiz_session_service


router = APIRouter(prefix="/api/public", tags=["public"])
logger = logging.getLogger(__name__)


@router.get("/quizzes", response_model=List[Dict[str, Any]])
async def list_public_quizzes(
    pagination: Pagination = Depends(),
    db: Session = Depends(get_db)
):
    """
    Public, published quizzes

    - Cached in Redis (TTL from PUBLIC_QUIZ_CACHE_TTL)
    """
    return quiz_service.list_public_quizzes(db, page=pagination.page, limit=pagination.limit)


@router.get("/quizzes/slug/{slug}", response_model=PublicQuizResponse)
async def get_public_quiz_by_slug(
    slug: str,
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db)
):
    """Public quiz by slug; `limit` returns a random subset of its questions"""
    return quiz_service.get_public_quiz_by_slug(db, slug, limit)


@router.get("/quizzes/{quiz_id}", response_model=PublicQuizResponse)
async def get_public_quiz(quiz_id: str, db: Session = Depends(get_db)):
    return quiz_service.get_public_quiz(db, quiz_id)


@router.post("/sessions", response_model=QuizSessionResponse, status_code=201)
async def start_guest_session(request: GuestSessionStart, db: Session = Depends(get_db)):
    """Start a guest attempt; attempts are counted per guest id"""
    session = quiz_session_service.start_guest_session(
        db, request.guest_id, request.guest_name, request.quiz_id, request.language
    )
    return mapper_service.session_response(session)


@router.post("/sessions/{session_id}/submit", response_model=QuizSessionResponse)
async def submit_guest_session(
    session_id: str,
    submission: GuestSessionSubmission,
    db: Session = Depends(get_db)
):
    """Grade a guest attempt server side, exactly like an authenticated one"""
    session = quiz_session_service.submit_guest_session(db, session_id, submission.guest_id, submission)
    return mapper_service.session_response(session)
