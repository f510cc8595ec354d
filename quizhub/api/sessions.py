"""
Quiz session API endpoints (authenticated players)
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from quizhub.api.deps import Pagination, get_current_user
from quizhub.database import get_db
from quizhub.models import User
from quizhub.schemas.quiz import DeleteResponse
from quizhub.schemas.session import QuizSessionResponse, SessionStart, SessionSubmission
from quizhub.services.mapper_service import mapper_service
from quizhub.services.quiz_session_service import quiz_session_service


router = APIRouter(prefix="/api/sessions", tags=["sessions"])
logger = logging.getLogger(__name__)


@router.post("", response_model=QuizSessionResponse, status_code=201)
async def start_session(
    request: SessionStart,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Start a new attempt of a quiz

    - Snapshots the quiz questions (answer keys stripped)
    - Enforces publication and the allowed attempts cap
    """
    session = quiz_session_service.start_session(db, current_user.id, request.quiz_id, request.language)
    return mapper_service.session_response(session)


@router.post("/{session_id}/submit", response_model=QuizSessionResponse)
async def submit_session(
    session_id: str,
    submission: SessionSubmission,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Submit answers and grade the session

    Grading strategy:
    - Multiple choice / true-false: exact set of correct choice texts
    - Numeric formula: exact match against the stored formula

    A session can be submitted only once.
    """
    session = quiz_session_service.submit_session(db, session_id, submission, current_user.id)
    return mapper_service.session_response(session)


@router.get("", response_model=List[QuizSessionResponse])
async def list_sessions(
    quiz_id: Optional[str] = Query(None),
    user_id: Optional[str] = Query(None),
    is_completed: Optional[bool] = Query(None),
    pagination: Pagination = Depends(),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List sessions visible to the caller, most recent first"""
    sessions = quiz_session_service.list_sessions(
        db,
        current_user,
        {"quiz_id": quiz_id, "user_id": user_id, "is_completed": is_completed},
        page=pagination.page,
        limit=pagination.limit,
    )
    return [mapper_service.session_response(session) for session in sessions]


@router.get("/{session_id}", response_model=QuizSessionResponse)
async def get_session(
    session_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    session = quiz_session_service.get_session(db, session_id, current_user)
    return mapper_service.session_response(session)


@router.delete("/{session_id}", response_model=DeleteResponse)
async def delete_session(
    session_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Delete a session

    - Admins and managers: any session
    - Students: only their own session that is still in progress
    """
    return quiz_session_service.delete_session(db, session_id, current_user)
