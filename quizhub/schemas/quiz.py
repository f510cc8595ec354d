"""
Pydantic schemas for quiz-related requests and responses
"""
from pydantic import BaseModel, Field, field_validator
from typing import Dict, List, Literal, Optional, Union
from uuid import UUID
from datetime import datetime

from quizhub.models.enums import Difficulty, QuizType
from quizhub.schemas.common import check_localized
from quizhub.schemas.question import QuestionOut, QuestionView


class QuestionSelection(BaseModel):
    """Manually selected question; score defaults to 1"""
    question_id: str
    score: Optional[float] = Field(None, ge=0)


class QuestionsConfig(BaseModel):
    """How the manifest is built: pick questions or draw them from chapters"""
    method: Literal["select", "generate"]
    chapter_ids: Optional[List[str]] = None
    number_of_questions: Optional[int] = Field(None, ge=1, le=200)
    difficulty: Optional[Difficulty] = None
    selected_questions: Optional[List[QuestionSelection]] = None


class QuizCreate(BaseModel):
    """Request schema for quiz creation"""
    training_id: str
    title: Dict[str, str]
    description: Optional[Dict[str, str]] = None
    slug: str = Field(..., pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$", max_length=255)
    thumbnail_url: Optional[str] = Field(None, max_length=500)
    quiz_type: QuizType
    deadline: Optional[datetime] = None
    duration_minutes: Optional[int] = Field(None, ge=1)
    global_score: float = Field(..., gt=0, description="Scale sessions are weighted onto, e.g. 20 or 100")
    allowed_attempts: Optional[int] = Field(None, ge=1)
    tags: List[str] = []
    is_public: bool = False
    questions_config: QuestionsConfig

    @field_validator("title")
    @classmethod
    def check_title(cls, value):
        return check_localized(value)

    @field_validator("description")
    @classmethod
    def check_description(cls, value):
        return check_localized(value, required=False)


class ManifestEntry(BaseModel):
    question_id: UUID
    score: float = Field(..., ge=0)


class QuizUpdate(BaseModel):
    """Partial update; `questions` replaces the whole manifest"""
    title: Optional[Dict[str, str]] = None
    description: Optional[Dict[str, str]] = None
    thumbnail_url: Optional[str] = Field(None, max_length=500)
    deadline: Optional[datetime] = None
    duration_minutes: Optional[int] = Field(None, ge=1)
    global_score: Optional[float] = Field(None, gt=0)
    allowed_attempts: Optional[int] = Field(None, ge=1)
    tags: Optional[List[str]] = None
    is_public: Optional[bool] = None
    questions: Optional[List[ManifestEntry]] = None

    @field_validator("title", "description")
    @classmethod
    def check_text(cls, value):
        return check_localized(value, required=False)


class PublishRequest(BaseModel):
    publish: bool = True


class QuizResponse(BaseModel):
    """Quiz definition with its manifest"""
    id: UUID
    training_id: UUID
    creator_id: UUID
    title: Dict[str, str]
    description: Optional[Dict[str, str]] = None
    slug: str
    thumbnail_url: Optional[str] = None
    quiz_type: QuizType
    is_published: bool
    published_at: Optional[datetime] = None
    is_public: bool
    deadline: Optional[datetime] = None
    duration_minutes: Optional[int] = None
    allowed_attempts: Optional[int] = None
    global_score: float
    max_possible_score: float
    tags: List[str] = []
    questions: List[ManifestEntry]
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class QuizDetailResponse(QuizResponse):
    """Quiz with dereferenced questions; answer keys only for authors"""
    question_details: List[Union[QuestionOut, QuestionView]] = []


class PublicQuizQuestion(BaseModel):
    score: float
    question: QuestionView


class PublicQuizResponse(BaseModel):
    """Public (guest playable) quiz, always redacted"""
    id: UUID
    title: Dict[str, str]
    description: Optional[Dict[str, str]] = None
    slug: str
    thumbnail_url: Optional[str] = None
    quiz_type: QuizType
    duration_minutes: Optional[int] = None
    allowed_attempts: Optional[int] = None
    global_score: float
    tags: List[str] = []
    questions: List[PublicQuizQuestion]


class DeleteResponse(BaseModel):
    message: str
