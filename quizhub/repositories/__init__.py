"""
Repositories - one per persisted entity
"""
from quizhub.repositories.user_repository import UserRepository
from quizhub.repositories.training_repository import TrainingRepository, ChapterRepository
from quizhub.repositories.question_repository import QuestionRepository
from quizhub.repositories.quiz_repository import QuizRepository
from quizhub.repositories.quiz_session_repository import QuizSessionRepository
from quizhub.repositories.notification_repository import NotificationRepository

__all__ = [
    "UserRepository", "TrainingRepository", "ChapterRepository", "QuestionRepository",
    "QuizRepository", "QuizSessionRepository", "NotificationRepository",
]
