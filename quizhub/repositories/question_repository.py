import random
from typing import List, Optional, Sequence
from uuid import UUID

from quizhub.models import Question
from quizhub.repositories.base import SqlRepository


class QuestionRepository(SqlRepository[Question]):
    model = Question
    entity_name = "question"

    def find_by_ids(self, question_ids: Sequence[UUID]) -> List[Question]:
        if not question_ids:
            return []
        return self.find_many({"id": list(question_ids)})

    def find_by_chapters(self, chapter_ids: Sequence[UUID], difficulty: Optional[str] = None) -> List[Question]:
        filters = {"chapter_id": list(chapter_ids)}
        if difficulty:
            filters["difficulty"] = difficulty
        return self.find_many(filters, order_by=Question.created_at)

    def sample(
        self,
        chapter_ids: Sequence[UUID],
        difficulty: Optional[str],
        size: int,
        rng: Optional[random.Random] = None,
    ) -> List[Question]:
        """
        Uniform random sample without replacement of matching questions

        Returns fewer than `size` questions when not enough match.
        """
        candidates = self.find_by_chapters(chapter_ids, difficulty)
        if len(candidates) <= size:
            return candidates
        return (rng or random).sample(candidates, size)
