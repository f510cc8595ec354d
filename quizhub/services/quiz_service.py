"""
Quiz definition service

Builds quiz manifests (manual selection or random draw from chapters),
enforces the creator role policy and the publication rules, and serves the
role-filtered and public quiz listings.
"""
import logging
import random
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from quizhub.config import settings
from quizhub.exceptions import (
    ForbiddenError, InsufficientQuestionsError, NotFoundError, ValidationError
)
from quizhub.models import Quiz, User
from quizhub.models.enums import QuizType, UserRole
from quizhub.repositories import QuestionRepository, QuizRepository, TrainingRepository
from quizhub.schemas.quiz import (
    PublicQuizResponse, QuestionsConfig, QuizCreate, QuizDetailResponse, QuizUpdate
)
from quizhub.services.access_control import access_policy, is_privileged
from quizhub.services.catalog_service import catalog_service
from quizhub.services.mapper_service import mapper_service
from quizhub.services.user_service import user_service
from quizhub.utils.cache import cache_service
from quizhub.utils.ids import parse_id, parse_ids

logger = logging.getLogger(__name__)


class QuizService:
    """
    Service for quiz definitions

    `general_training_id` identifies the training whose published quizzes are
    listed for every student and teacher.
    """

    # Fields a non-admin may not touch once the quiz is published
    SENSITIVE_FIELDS = ("questions", "global_score", "duration_minutes", "allowed_attempts")

    def __init__(self, general_training_id: UUID, rng: Optional[random.Random] = None):
        if general_training_id is None:
            raise ValueError("general_training_id must be configured")
        self.general_training_id = general_training_id
        self.rng = rng

    # Creation

    def create_quiz(self, db: Session, data: QuizCreate, creator_id: Any) -> Quiz:
        """
        Create a quiz and its manifest

        Raises:
            NotFoundError: creator, training or a selected question is missing
            ForbiddenError: creator role may not produce this quiz type
            InsufficientQuestionsError: random draw cannot reach the requested count
            ConflictError: slug already taken
        """
        training_id = parse_id(data.training_id, "training ID")
        creator = user_service.require_user(db, creator_id, "Creator")
        self._check_role_policy(creator, data.quiz_type)

        if not TrainingRepository(db).find_by_id(training_id):
            raise NotFoundError("Training not found.")

        manifest = self._build_manifest(db, data.questions_config)

        quiz = mapper_service.quiz_from_create(data, training_id, creator.id, manifest)
        quiz = QuizRepository(db).create(quiz)

        logger.info(
            f"Quiz created: {quiz.id} ({quiz.quiz_type}) by {creator.id} "
            f"with {len(manifest)} question(s), method={data.questions_config.method}"
        )
        return quiz

    def _check_role_policy(self, creator: User, quiz_type: QuizType) -> None:
        if creator.role == UserRole.STUDENT.value and quiz_type != QuizType.REVISION:
            raise ForbiddenError("Students can only create revision quizzes.")
        if creator.role == UserRole.TEACHER.value and quiz_type == QuizType.REVISION:
            raise ForbiddenError("Teachers cannot create revision quizzes.")
        if creator.role not in [role.value for role in UserRole]:
            raise ForbiddenError("Unauthorized role for creating quizzes.")

    def _build_manifest(self, db: Session, config: QuestionsConfig) -> List[Dict[str, Any]]:
        if config.method == "generate":
            return self._generate_manifest(db, config)
        return self._select_manifest(db, config)

    def _generate_manifest(self, db: Session, config: QuestionsConfig) -> List[Dict[str, Any]]:
        if not config.chapter_ids or not config.number_of_questions:
            raise ValidationError("Chapter IDs and number of questions are required for question generation.")

        difficulty = config.difficulty.value if config.difficulty else None
        questions = catalog_service.sample_questions(
            db, config.chapter_ids, difficulty, config.number_of_questions, self.rng
        )

        if len(questions) < config.number_of_questions:
            raise InsufficientQuestionsError(
                f"Could not find {config.number_of_questions} questions for the specified criteria. "
                f"Found {len(questions)}."
            )

        return mapper_service.manifest((question.id, 1) for question in questions)

    def _select_manifest(self, db: Session, config: QuestionsConfig) -> List[Dict[str, Any]]:
        if not config.selected_questions:
            raise ValidationError("Selected question IDs are required for manual selection.")

        question_ids = parse_ids([item.question_id for item in config.selected_questions], "question ID")
        if len(set(question_ids)) != len(question_ids):
            raise ValidationError("A question can only appear once in a quiz.")

        self._ensure_questions_exist(db, question_ids)

        return mapper_service.manifest(
            (question_id, item.score if item.score is not None else 1)
            for question_id, item in zip(question_ids, config.selected_questions)
        )

    def _ensure_questions_exist(self, db: Session, question_ids: List[UUID]) -> None:
        found = {question.id for question in QuestionRepository(db).find_by_ids(question_ids)}
        missing = [str(question_id) for question_id in question_ids if question_id not in found]
        if missing:
            raise NotFoundError(f"Question(s) not found: {', '.join(missing)}")

    # Updates

    def update_quiz(self, db: Session, quiz_id: Any, data: QuizUpdate, requester: User) -> Quiz:
        repository = QuizRepository(db)
        quiz = self._require_quiz(repository, quiz_id)

        if not access_policy.can_manage_quiz(requester, quiz):
            raise ForbiddenError("Not authorized to update this quiz.")

        changes = data.model_dump(exclude_unset=True)
        if quiz.is_published and not is_privileged(requester):
            if any(field in changes for field in self.SENSITIVE_FIELDS):
                raise ForbiddenError("Cannot update sensitive fields of a published quiz.")

        if "questions" in changes:
            if not data.questions:
                raise ValidationError("Quiz must contain at least one question.")
            question_ids = [entry.question_id for entry in data.questions]
            if len(set(question_ids)) != len(question_ids):
                raise ValidationError("A question can only appear once in a quiz.")
            self._ensure_questions_exist(db, question_ids)
            quiz.questions = mapper_service.manifest((entry.question_id, entry.score) for entry in data.questions)

        for field in ("title", "description", "thumbnail_url", "deadline", "duration_minutes",
                      "global_score", "allowed_attempts", "tags", "is_public"):
            if field in changes:
                setattr(quiz, field, changes[field])

        quiz = repository.save(quiz)
        cache_service.clear_public_quizzes()
        logger.info(f"Quiz updated: {quiz.id} fields={sorted(changes)}")
        return quiz

    def publish_quiz(self, db: Session, quiz_id: Any, publish: bool, requester: User) -> Quiz:
        """Publish or unpublish; revision quizzes can never be published"""
        repository = QuizRepository(db)
        quiz = self._require_quiz(repository, quiz_id)

        is_creator_teacher = quiz.creator_id == requester.id and requester.role == UserRole.TEACHER.value
        if not is_creator_teacher and not is_privileged(requester):
            raise ForbiddenError("Not authorized to publish/unpublish this quiz.")

        if quiz.quiz_type == QuizType.REVISION.value and publish:
            raise ValidationError("Revision quizzes cannot be published.")
        if publish and quiz.is_published:
            raise ValidationError("Quiz is already published.")
        if not publish and not quiz.is_published:
            raise ValidationError("Quiz is already unpublished.")

        quiz.is_published = publish
        quiz.published_at = datetime.now(timezone.utc) if publish else None

        quiz = repository.save(quiz)
        cache_service.clear_public_quizzes()
        logger.info(f"Quiz {quiz.id} {'published' if publish else 'unpublished'} by {requester.id}")
        return quiz

    def delete_quiz(self, db: Session, quiz_id: Any, requester: User) -> Dict[str, str]:
        repository = QuizRepository(db)
        quiz = self._require_quiz(repository, quiz_id)

        if not is_privileged(requester):
            if quiz.is_published:
                raise ForbiddenError("Published quizzes can only be deleted by admin/manager.")
            if quiz.creator_id != requester.id:
                raise ForbiddenError("Not authorized to delete this quiz.")

        repository.delete(quiz)
        cache_service.clear_public_quizzes()
        logger.info(f"Quiz deleted: {quiz_id} by {requester.id}")
        return {"message": "Quiz deleted successfully."}

    # Reads

    def list_quizzes(
        self,
        db: Session,
        requester: User,
        filters: Optional[Dict[str, Any]] = None,
        page: int = 1,
        limit: int = 10
    ) -> List[Quiz]:
        """Quizzes visible to the requester, newest first"""
        clauses = []
        published_private = and_(Quiz.is_published.is_(True), Quiz.is_public.is_(False))
        general_published = and_(Quiz.training_id == self.general_training_id, Quiz.is_published.is_(True))

        if requester.role == UserRole.STUDENT.value:
            own_revision = and_(Quiz.creator_id == requester.id, Quiz.quiz_type == QuizType.REVISION.value)
            clauses.append(or_(published_private, own_revision, general_published))
        elif requester.role == UserRole.TEACHER.value:
            clauses.append(or_(Quiz.creator_id == requester.id, published_private, general_published))

        return QuizRepository(db).find_many(
            filters, *clauses, page=page, limit=limit, order_by=Quiz.created_at.desc()
        )

    def get_quiz(
        self,
        db: Session,
        quiz_id: Any,
        requester: User,
        include_questions: bool = False
    ) -> QuizDetailResponse:
        quiz = self._require_quiz(QuizRepository(db), quiz_id)

        if not access_policy.can_view_quiz(requester, quiz):
            raise ForbiddenError("Not authorized to view this quiz.")

        questions = []
        if include_questions:
            questions = QuestionRepository(db).find_by_ids(
                parse_ids([entry["question_id"] for entry in quiz.questions], "question ID")
            )
        return mapper_service.quiz_detail(quiz, questions, reveal_answers=access_policy.can_manage_quiz(requester, quiz))

    def find_quiz(self, db: Session, quiz_id: Any) -> Optional[Quiz]:
        return QuizRepository(db).find_by_id(parse_id(quiz_id, "quiz ID"))

    # Public (unauthenticated) access

    def list_public_quizzes(self, db: Session, page: int = 1, limit: int = 10) -> List[Dict[str, Any]]:
        cache_key = cache_service.public_list_key(page, limit)
        cached = cache_service.get(cache_key)
        if cached is not None:
            return cached

        quizzes = QuizRepository(db).find_many(
            {"is_public": True, "is_published": True},
            page=page, limit=limit, order_by=Quiz.created_at.desc()
        )
        listing = [mapper_service.quiz_response(quiz).model_dump(mode="json") for quiz in quizzes]
        cache_service.set(cache_key, listing)
        return listing

    def get_public_quiz(self, db: Session, quiz_id: Any) -> PublicQuizResponse:
        quiz_id = parse_id(quiz_id, "quiz ID")
        cache_key = cache_service.public_quiz_key(quiz_id)
        cached = cache_service.get(cache_key)
        if cached is not None:
            return PublicQuizResponse(**cached)

        quiz = self._require_public_quiz(QuizRepository(db).find_by_id(quiz_id))
        response = self._public_view(db, quiz)
        cache_service.set(cache_key, response.model_dump(mode="json"))
        return response

    def get_public_quiz_by_slug(self, db: Session, slug: str, limit: Optional[int] = None) -> PublicQuizResponse:
        """Public quiz by slug; `limit` draws a uniform random subset of its questions"""
        quiz = self._require_public_quiz(QuizRepository(db).find_by_slug(slug))

        entries = list(quiz.questions)
        if limit and len(entries) > limit:
            entries = (self.rng or random).sample(entries, limit)
        return self._public_view(db, quiz, entries)

    def _public_view(self, db: Session, quiz: Quiz, entries: Optional[List[Dict[str, Any]]] = None) -> PublicQuizResponse:
        entries = entries if entries is not None else quiz.questions
        questions = QuestionRepository(db).find_by_ids(
            parse_ids([entry["question_id"] for entry in entries], "question ID")
        )
        return mapper_service.public_quiz(quiz, questions, entries)

    def _require_public_quiz(self, quiz: Optional[Quiz]) -> Quiz:
        if not quiz or not (quiz.is_public and quiz.is_published):
            raise NotFoundError("Public quiz not found or not accessible.")
        return quiz

    def _require_quiz(self, repository: QuizRepository, quiz_id: Any) -> Quiz:
        quiz = repository.find_by_id(parse_id(quiz_id, "quiz ID"))
        if not quiz:
            raise NotFoundError("Quiz not found.")
        return quiz


# Global instance
quiz_service = QuizService(general_training_id=settings.GENERAL_TRAINING_ID)
