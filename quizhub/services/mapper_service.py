"""
Explicit DTO <-> entity mapping

Request schemas become entities here and entities become response schemas
here; no implicit population happens anywhere else.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence
from uuid import UUID

from quizhub.models import Question, Quiz, QuizSession
from quizhub.schemas.question import QuestionCreate, QuestionOut, QuestionView
from quizhub.schemas.quiz import (
    PublicQuizQuestion, PublicQuizResponse, QuizCreate, QuizDetailResponse, QuizResponse
)
from quizhub.schemas.session import QuizSessionResponse
from quizhub.services.redaction import question_view

logger = logging.getLogger(__name__)


class MapperService:

    def question_from_create(self, data: QuestionCreate) -> Question:
        choices = None
        if data.choices:
            choices = [
                {
                    "text": choice.text,
                    "is_correct": choice.is_correct,
                    "media": choice.media.model_dump(mode="json") if choice.media else None,
                }
                for choice in data.choices
            ]

        return Question(
            chapter_id=data.chapter_id,
            text=data.text,
            kind=data.kind.value,
            difficulty=data.difficulty.value,
            media=data.media.model_dump(mode="json") if data.media else None,
            choices=choices,
            correct_answer_formula=data.correct_answer_formula,
            explanation=data.explanation,
            tags=data.tags,
        )

    def manifest(self, entries: Iterable[Any]) -> List[Dict[str, Any]]:
        """Build the stored manifest from (question_id, score) pairs"""
        return [{"question_id": str(question_id), "score": float(score)} for question_id, score in entries]

    def quiz_from_create(
        self,
        data: QuizCreate,
        training_id: UUID,
        creator_id: UUID,
        manifest: List[Dict[str, Any]]
    ) -> Quiz:
        return Quiz(
            training_id=training_id,
            creator_id=creator_id,
            title=data.title,
            description=data.description,
            slug=data.slug,
            thumbnail_url=data.thumbnail_url,
            quiz_type=data.quiz_type.value,
            is_published=False,
            published_at=None,
            is_public=data.is_public,
            deadline=data.deadline,
            duration_minutes=data.duration_minutes,
            allowed_attempts=data.allowed_attempts,
            global_score=data.global_score,
            tags=data.tags,
            questions=manifest,
        )

    def quiz_response(self, quiz: Quiz) -> QuizResponse:
        return QuizResponse.model_validate(quiz)

    def quiz_detail(
        self,
        quiz: Quiz,
        questions: Sequence[Question],
        reveal_answers: bool
    ) -> QuizDetailResponse:
        """Quiz with questions in manifest order; answer keys only when `reveal_answers`"""
        by_id = {str(question.id): question for question in questions}
        details: List[Any] = []
        for entry in quiz.questions:
            question = by_id.get(entry["question_id"])
            if question is None:
                continue
            if reveal_answers:
                details.append(QuestionOut.model_validate(question))
            else:
                details.append(QuestionView.model_validate(question_view(question)))

        detail = QuizDetailResponse.model_validate(quiz)
        detail.question_details = details
        return detail

    def public_quiz(
        self,
        quiz: Quiz,
        questions: Sequence[Question],
        entries: Optional[Sequence[Dict[str, Any]]] = None
    ) -> PublicQuizResponse:
        by_id = {str(question.id): question for question in questions}
        items = [
            PublicQuizQuestion(
                score=entry["score"],
                question=QuestionView.model_validate(question_view(by_id[entry["question_id"]])),
            )
            for entry in (entries if entries is not None else quiz.questions)
            if entry["question_id"] in by_id
        ]
        return PublicQuizResponse(
            id=quiz.id,
            title=quiz.title,
            description=quiz.description,
            slug=quiz.slug,
            thumbnail_url=quiz.thumbnail_url,
            quiz_type=quiz.quiz_type,
            duration_minutes=quiz.duration_minutes,
            allowed_attempts=quiz.allowed_attempts,
            global_score=quiz.global_score,
            tags=quiz.tags or [],
            questions=items,
        )

    def session_response(self, session: QuizSession) -> QuizSessionResponse:
        return QuizSessionResponse.model_validate(session)


# Global instance
mapper_service = MapperService()
