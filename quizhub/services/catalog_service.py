"""
Content catalog service - trainings, chapters and questions
"""
import logging
import random
from typing import Any, List, Optional, Sequence

from sqlalchemy.orm import Session

from quizhub.exceptions import ForbiddenError, NotFoundError
from quizhub.models import Chapter, Question, Training, User
from quizhub.models.enums import PRIVILEGED_ROLES, UserRole
from quizhub.repositories import (
    ChapterRepository, QuestionRepository, TrainingRepository, UserRepository
)
from quizhub.schemas.question import ChapterCreate, QuestionCreate, TrainingCreate
from quizhub.services.mapper_service import mapper_service
from quizhub.utils.ids import parse_id, parse_ids

logger = logging.getLogger(__name__)

AUTHOR_ROLES = (UserRole.TEACHER.value,) + tuple(role.value for role in PRIVILEGED_ROLES)


class CatalogService:
    """Authoring and lookup of the question pools quizzes are built from"""

    def _require_author(self, requester: User) -> None:
        if requester.role not in AUTHOR_ROLES:
            raise ForbiddenError("Only teachers, managers and admins can author content.")

    # Trainings

    def create_training(self, db: Session, data: TrainingCreate, requester: User) -> Training:
        if requester.role not in [role.value for role in PRIVILEGED_ROLES]:
            raise ForbiddenError("Only managers and admins can create trainings.")

        teachers = UserRepository(db).find_many({"id": list(data.teacher_ids)}) if data.teacher_ids else []
        if len(teachers) != len(set(data.teacher_ids)):
            raise NotFoundError("One or more assigned teachers not found.")
        if any(teacher.role != UserRole.TEACHER.value for teacher in teachers):
            raise ForbiddenError("Only users with the teacher role can be assigned to a training.")

        training = Training(title=data.title, slug=data.slug, teachers=teachers)
        training = TrainingRepository(db).create(training)
        logger.info(f"Training created: {training.id} with {len(teachers)} teacher(s)")
        return training

    def find_training_by_id(self, db: Session, training_id: Any) -> Optional[Training]:
        return TrainingRepository(db).find_by_id(parse_id(training_id, "training ID"))

    # Chapters

    def create_chapter(self, db: Session, data: ChapterCreate, requester: User) -> Chapter:
        self._require_author(requester)
        if not TrainingRepository(db).find_by_id(data.training_id):
            raise NotFoundError("Training not found.")

        chapter = ChapterRepository(db).create(
            Chapter(training_id=data.training_id, title=data.title, order=data.order)
        )
        logger.info(f"Chapter created: {chapter.id}")
        return chapter

    # Questions

    def create_question(self, db: Session, data: QuestionCreate, requester: User) -> Question:
        self._require_author(requester)
        if not ChapterRepository(db).find_by_id(data.chapter_id):
            raise NotFoundError("Chapter not found.")

        question = QuestionRepository(db).create(mapper_service.question_from_create(data))
        logger.info(f"Question created: {question.id} ({question.kind})")
        return question

    def find_question_by_id(self, db: Session, question_id: Any) -> Optional[Question]:
        return QuestionRepository(db).find_by_id(parse_id(question_id, "question ID"))

    def find_questions_by_ids(self, db: Session, question_ids: Sequence[Any]) -> List[Question]:
        return QuestionRepository(db).find_by_ids(parse_ids(question_ids, "question ID"))

    def find_questions_by_chapter(
        self,
        db: Session,
        chapter_ids: Sequence[Any],
        difficulty: Optional[str] = None
    ) -> List[Question]:
        return QuestionRepository(db).find_by_chapters(parse_ids(chapter_ids, "chapter ID"), difficulty)

    def sample_questions(
        self,
        db: Session,
        chapter_ids: Sequence[Any],
        difficulty: Optional[str],
        size: int,
        rng: Optional[random.Random] = None
    ) -> List[Question]:
        """Uniform sample without replacement; may return fewer than `size`"""
        return QuestionRepository(db).sample(parse_ids(chapter_ids, "chapter ID"), difficulty, size, rng)


# Global instance
catalog_service = CatalogService()
