from typing import List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from quizhub.models import Chapter, Training, training_teachers
from quizhub.repositories.base import SqlRepository


class TrainingRepository(SqlRepository[Training]):
    model = Training
    entity_name = "training"

    def find_ids_taught_by(self, teacher_id: UUID) -> List[UUID]:
        """Ids of the trainings listing `teacher_id` as an assigned teacher"""
        stmt = select(training_teachers.c.training_id).where(training_teachers.c.user_id == teacher_id)
        try:
            return list(self.db.scalars(stmt).all())
        except SQLAlchemyError as e:
            raise self._storage_failure("teacher lookup", e) from e


class ChapterRepository(SqlRepository[Chapter]):
    model = Chapter
    entity_name = "chapter"
