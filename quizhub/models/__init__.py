"""
Database models package
"""
from quizhub.models.user import User
from quizhub.models.training import Training, training_teachers
from quizhub.models.chapter import Chapter
from quizhub.models.question import Question
from quizhub.models.quiz import Quiz
from quizhub.models.quiz_session import QuizSession
from quizhub.models.notification import Notification

__all__ = [
    "User", "Training", "training_teachers", "Chapter", "Question",
    "Quiz", "QuizSession", "Notification",
]
