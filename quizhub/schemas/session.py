"""
Pydantic schemas for quiz session start, submission and results
"""
from pydantic import BaseModel, Field, StrictBool
from typing import List, Optional, Union
from uuid import UUID
from datetime import datetime

from quizhub.models.enums import Language, PassStatus
from quizhub.schemas.question import QuestionView

# Text for single choice / formula, list for multi-select, number for formulas,
# bool for true_false (strict, so JSON true is not coerced to 1)
AnswerValue = Union[StrictBool, str, int, float, List[str]]


class SessionStart(BaseModel):
    quiz_id: str
    language: Language = Language.EN


class GuestSessionStart(SessionStart):
    guest_id: str = Field(..., min_length=1, max_length=100)
    guest_name: str = Field(..., min_length=1, max_length=100)


class ResponseSubmission(BaseModel):
    question_id: str
    user_answer: AnswerValue
    time_taken_seconds: int = Field(0, ge=0)


class SessionSubmission(BaseModel):
    """Negative durations are rejected by the engine, not here"""
    responses: List[ResponseSubmission]
    duration_seconds: int


class GuestSessionSubmission(SessionSubmission):
    guest_id: str = Field(..., min_length=1, max_length=100)


class SessionResponseItem(BaseModel):
    question_id: UUID
    question: Optional[QuestionView] = None  # present while the session is in progress
    point_value: float
    user_answer: Optional[AnswerValue] = None
    is_correct: bool = False
    score_earned: float = 0.0
    time_taken_seconds: int = 0


class QuizSessionResponse(BaseModel):
    id: UUID
    user_id: Optional[UUID] = None
    guest_id: Optional[str] = None
    guest_name: Optional[str] = None
    quiz_id: UUID
    quiz_date: Optional[datetime] = None
    language: Language
    attempt_number: int
    responses: List[SessionResponseItem]
    max_possible_score: float
    quiz_global_score: float
    total_score_earned: float
    final_calculated_score: float
    duration_seconds: int
    is_completed: bool
    pass_status: Optional[PassStatus] = None

    class Config:
        from_attributes = True
