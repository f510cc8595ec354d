from typing import Any, Dict, Optional
from uuid import UUID

from quizhub.models import QuizSession
from quizhub.repositories.base import SqlRepository


class QuizSessionRepository(SqlRepository[QuizSession]):
    model = QuizSession
    entity_name = "quiz session"

    def count_attempts(self, quiz_id: UUID, user_id: Optional[UUID] = None, guest_id: Optional[str] = None) -> int:
        if user_id is not None:
            return self.count({"quiz_id": quiz_id, "user_id": user_id})
        return self.count({"quiz_id": quiz_id, "guest_id": guest_id})

    def complete(self, session_id: UUID, values: Dict[str, Any]) -> bool:
        """
        Flip is_completed false -> true together with the grading results

        Returns:
            False when another submission already completed the session
        """
        return self.compare_and_set(session_id, "is_completed", False, {**values, "is_completed": True})
