"""Pytest configuration and shared fixtures"""
import os

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["REDIS_URL"] = ""
os.environ["GENERAL_TRAINING_ID"] = "00000000-0000-4000-8000-000000000001"

import uuid
from typing import Any, Dict, List, Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import quizhub.models  # noqa: F401
from quizhub.config import settings
from quizhub.database import Base
from quizhub.models import Chapter, Question, Quiz, Training, User


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    yield session
    session.close()


@pytest.fixture
def make_user(db):
    def _make(role: str = "student", display_name: Optional[str] = None) -> User:
        user = User(role=role, display_name=display_name or f"{role}-{uuid.uuid4().hex[:6]}")
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


@pytest.fixture
def make_training(db):
    def _make(teachers: List[User] = (), training_id: Optional[uuid.UUID] = None) -> Training:
        training = Training(
            id=training_id or uuid.uuid4(),
            title={"en": "Algebra"},
            slug=f"training-{uuid.uuid4().hex[:8]}",
            teachers=list(teachers),
        )
        db.add(training)
        db.commit()
        db.refresh(training)
        return training
    return _make


@pytest.fixture
def make_chapter(db):
    def _make(training: Training) -> Chapter:
        chapter = Chapter(training_id=training.id, title={"en": "Linear equations"}, order=1)
        db.add(chapter)
        db.commit()
        db.refresh(chapter)
        return chapter
    return _make


@pytest.fixture
def make_question(db):
    def _make(
        chapter: Chapter,
        kind: str = "multiple_choice",
        choices: Optional[List[Dict[str, Any]]] = None,
        formula: Optional[str] = None,
        difficulty: str = "medium",
    ) -> Question:
        if kind != "numeric_formula" and choices is None:
            choices = [
                {"text": {"en": "4", "fr": "quatre"}, "is_correct": True, "media": None},
                {"text": {"en": "5", "fr": "cinq"}, "is_correct": False, "media": None},
            ]
        question = Question(
            chapter_id=chapter.id,
            text={"en": "What is 2 + 2?"},
            kind=kind,
            difficulty=difficulty,
            choices=choices,
            correct_answer_formula=formula,
            explanation={"en": "Basic addition."},
            tags=["arithmetic"],
        )
        db.add(question)
        db.commit()
        db.refresh(question)
        return question
    return _make


@pytest.fixture
def make_quiz(db):
    def _make(
        training: Training,
        creator: User,
        questions: List[Question],
        scores: Optional[List[float]] = None,
        quiz_type: str = "formative",
        is_published: bool = True,
        is_public: bool = False,
        allowed_attempts: Optional[int] = None,
        global_score: float = 20.0,
    ) -> Quiz:
        scores = scores or [1.0] * len(questions)
        quiz = Quiz(
            training_id=training.id,
            creator_id=creator.id,
            title={"en": "Weekly check"},
            slug=f"quiz-{uuid.uuid4().hex[:8]}",
            quiz_type=quiz_type,
            is_published=is_published,
            is_public=is_public,
            allowed_attempts=allowed_attempts,
            global_score=global_score,
            tags=[],
            questions=[
                {"question_id": str(question.id), "score": float(score)}
                for question, score in zip(questions, scores)
            ],
        )
        db.add(quiz)
        db.commit()
        db.refresh(quiz)
        return quiz
    return _make


@pytest.fixture
def classroom(make_user, make_training, make_chapter):
    """A teacher assigned to a training with one chapter, plus a student"""
    teacher = make_user("teacher", "Ms Teacher")
    student = make_user("student", "Sam Student")
    training = make_training([teacher])
    chapter = make_chapter(training)
    return {"teacher": teacher, "student": student, "training": training, "chapter": chapter}


@pytest.fixture
def general_training(make_training):
    return make_training(training_id=settings.GENERAL_TRAINING_ID)
