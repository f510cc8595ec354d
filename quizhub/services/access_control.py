"""
Role based access control over quizzes and quiz sessions

Nothing is cached: every check re-reads role, ownership and the
training-teacher associations from storage.
"""
import logging
from typing import Any, List

from sqlalchemy import false, or_
from sqlalchemy.orm import Session

from quizhub.exceptions import ForbiddenError
from quizhub.models import Quiz, QuizSession, User
from quizhub.models.enums import PRIVILEGED_ROLES, UserRole
from quizhub.repositories import QuizRepository, TrainingRepository

logger = logging.getLogger(__name__)


def is_privileged(user: User) -> bool:
    return user.role in [role.value for role in PRIVILEGED_ROLES]


class AccessPolicy:

    def teacher_can_view_quiz(self, db: Session, teacher: User, quiz: Quiz) -> bool:
        """Teachers see quizzes they created or that belong to a training they teach"""
        if quiz.creator_id == teacher.id:
            return True
        return quiz.training_id in TrainingRepository(db).find_ids_taught_by(teacher.id)

    def ensure_session_owner(self, session: QuizSession, user_id: Any, action: str = "submit") -> None:
        if session.user_id is None or session.user_id != user_id:
            raise ForbiddenError(f"Not authorized to {action} this quiz session.")

    def ensure_guest_owner(self, session: QuizSession, guest_id: str) -> None:
        if session.guest_id is None or session.guest_id != guest_id:
            raise ForbiddenError("Not authorized to submit this quiz session.")

    def ensure_can_view_session(self, db: Session, requester: User, session: QuizSession) -> None:
        if is_privileged(requester):
            return
        if requester.role == UserRole.STUDENT.value:
            self.ensure_session_owner(session, requester.id, "view")
            return
        if requester.role == UserRole.TEACHER.value:
            if session.user_id == requester.id:
                return
            quiz = QuizRepository(db).find_by_id(session.quiz_id)
            if quiz and self.teacher_can_view_quiz(db, requester, quiz):
                return
        raise ForbiddenError("Not authorized to view this quiz session.")

    def ensure_can_delete_session(self, requester: User, session: QuizSession) -> None:
        if is_privileged(requester):
            return
        if (
            requester.role == UserRole.STUDENT.value
            and session.user_id == requester.id
            and not session.is_completed
        ):
            return
        raise ForbiddenError("Not authorized to delete this quiz session.")

    def session_visibility_clauses(self, db: Session, requester: User) -> List[Any]:
        """Query clauses restricting a session listing to what the requester may see"""
        if is_privileged(requester):
            return []
        if requester.role == UserRole.STUDENT.value:
            return [QuizSession.user_id == requester.id]
        if requester.role == UserRole.TEACHER.value:
            quiz_ids = self.teacher_quiz_ids(db, requester)
            if not quiz_ids:
                return [QuizSession.user_id == requester.id]
            return [or_(QuizSession.quiz_id.in_(quiz_ids), QuizSession.user_id == requester.id)]
        return [false()]

    def teacher_quiz_ids(self, db: Session, teacher: User) -> List[Any]:
        training_ids = TrainingRepository(db).find_ids_taught_by(teacher.id)
        clauses = [Quiz.creator_id == teacher.id]
        if training_ids:
            clauses.append(Quiz.training_id.in_(training_ids))
        return [quiz.id for quiz in QuizRepository(db).find_many(None, or_(*clauses))]

    def can_manage_quiz(self, requester: User, quiz: Quiz) -> bool:
        """Creator or admin/manager"""
        return is_privileged(requester) or quiz.creator_id == requester.id

    def can_view_quiz(self, requester: User, quiz: Quiz) -> bool:
        """Published or public quizzes are visible to everyone, other drafts only to their managers"""
        return bool(quiz.is_published or quiz.is_public) or self.can_manage_quiz(requester, quiz)


# Global instance
access_policy = AccessPolicy()
