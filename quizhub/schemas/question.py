"""
Pydantic schemas for the content catalog (trainings, chapters, questions)
"""
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Dict, List, Optional
from uuid import UUID
from datetime import datetime

from quizhub.models.enums import Difficulty, QuestionKind
from quizhub.schemas.common import Media, check_localized


class TrainingCreate(BaseModel):
    title: Dict[str, str]
    slug: str = Field(..., pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$", max_length=255)
    teacher_ids: List[UUID] = []

    @field_validator("title")
    @classmethod
    def check_title(cls, value):
        return check_localized(value)


class TrainingOut(BaseModel):
    id: UUID
    title: Dict[str, str]
    slug: str
    teacher_ids: List[UUID]

    class Config:
        from_attributes = True


class ChapterCreate(BaseModel):
    training_id: UUID
    title: Dict[str, str]
    order: int = Field(0, ge=0)

    @field_validator("title")
    @classmethod
    def check_title(cls, value):
        return check_localized(value)


class ChapterOut(BaseModel):
    id: UUID
    training_id: UUID
    title: Dict[str, str]
    order: int

    class Config:
        from_attributes = True


class ChoiceIn(BaseModel):
    text: Dict[str, str]
    is_correct: bool
    media: Optional[Media] = None

    @field_validator("text")
    @classmethod
    def check_text(cls, value):
        return check_localized(value)


class QuestionCreate(BaseModel):
    """
    Question authoring payload

    multiple_choice needs choices with at least one correct entry,
    true_false exactly two choices with one correct, numeric_formula a
    correct_answer_formula. The other representation must stay empty.
    """
    chapter_id: UUID
    text: Dict[str, str]
    kind: QuestionKind
    difficulty: Difficulty = Difficulty.MEDIUM
    media: Optional[Media] = None
    choices: Optional[List[ChoiceIn]] = None
    correct_answer_formula: Optional[str] = Field(None, max_length=200)
    explanation: Optional[Dict[str, str]] = None
    tags: List[str] = []

    @field_validator("text")
    @classmethod
    def check_text(cls, value):
        return check_localized(value)

    @field_validator("explanation")
    @classmethod
    def check_explanation(cls, value):
        return check_localized(value, required=False)

    @field_validator("correct_answer_formula")
    @classmethod
    def strip_formula(cls, value):
        return value.strip() if value is not None else value

    @field_validator("tags")
    @classmethod
    def check_tags(cls, value):
        tags = [tag.strip() for tag in value if tag and tag.strip()]
        if any(len(tag) > 30 for tag in tags):
            raise ValueError("Tags are limited to 30 characters")
        return tags

    @model_validator(mode="after")
    def check_answer_representation(self):
        if self.kind in (QuestionKind.MULTIPLE_CHOICE, QuestionKind.TRUE_FALSE):
            if not self.choices:
                raise ValueError(f"{self.kind.value} questions require choices")
            if self.correct_answer_formula:
                raise ValueError(f"{self.kind.value} questions cannot have a correct_answer_formula")
            correct = sum(1 for choice in self.choices if choice.is_correct)
            if correct == 0:
                raise ValueError("At least one choice must be correct")
            if self.kind == QuestionKind.TRUE_FALSE and (len(self.choices) != 2 or correct != 1):
                raise ValueError("true_false questions need exactly two choices, one of them correct")
        elif self.kind == QuestionKind.NUMERIC_FORMULA:
            if not self.correct_answer_formula:
                raise ValueError("numeric_formula questions require a correct_answer_formula")
            if self.choices:
                raise ValueError("numeric_formula questions cannot have choices")
        return self


class ChoiceOut(BaseModel):
    text: Dict[str, str]
    is_correct: bool
    media: Optional[Media] = None


class QuestionOut(BaseModel):
    """Full question including the answer key (authors only)"""
    id: UUID
    chapter_id: UUID
    text: Dict[str, str]
    kind: QuestionKind
    difficulty: Difficulty
    media: Optional[Media] = None
    choices: Optional[List[ChoiceOut]] = None
    correct_answer_formula: Optional[str] = None
    explanation: Optional[Dict[str, str]] = None
    tags: List[str] = []
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ChoiceView(BaseModel):
    text: Dict[str, str]
    media: Optional[Media] = None


class QuestionView(BaseModel):
    """Redacted question: no correctness flags, no formula, no explanation"""
    id: UUID
    text: Dict[str, str]
    kind: QuestionKind
    difficulty: Difficulty
    tags: List[str] = []
    media: Optional[Media] = None
    choices: Optional[List[ChoiceView]] = None
