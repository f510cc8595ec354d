from quizhub.models import Quiz
from quizhub.repositories.base import SqlRepository


class QuizRepository(SqlRepository[Quiz]):
    model = Quiz
    entity_name = "quiz"

    def find_by_slug(self, slug: str):
        matches = self.find_many({"slug": slug}, limit=1)
        return matches[0] if matches else None
