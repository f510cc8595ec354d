"""
QuizSession model - one attempt of a user (or guest) against a quiz
"""
from sqlalchemy import (
    Column, String, Integer, Float, Boolean, TIMESTAMP, ForeignKey, Uuid,
    UniqueConstraint, func
)
from quizhub.database import Base, JSONDocument
from datetime import datetime, timezone
import uuid


class QuizSession(Base):
    """
    Quiz sessions table

    `responses` holds one entry per manifest question:
    {"question_id", "question" (redacted view, in-progress only), "point_value",
     "user_answer", "is_correct", "score_earned", "time_taken_seconds"}.
    `max_possible_score` and `quiz_global_score` are snapshotted at start.
    """
    __tablename__ = "quiz_sessions"
    __table_args__ = (
        UniqueConstraint("user_id", "quiz_id", "attempt_number", name="uq_session_user_attempt"),
        UniqueConstraint("guest_id", "quiz_id", "attempt_number", name="uq_session_guest_attempt"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id"), index=True)
    guest_id = Column(String(100), index=True)
    guest_name = Column(String(100))
    quiz_id = Column(Uuid, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
    quiz_date = Column(TIMESTAMP(timezone=True), default=lambda: datetime.now(timezone.utc))
    language = Column(String(5), nullable=False)
    attempt_number = Column(Integer, nullable=False)
    responses = Column(JSONDocument, nullable=False)
    max_possible_score = Column(Float, nullable=False)
    quiz_global_score = Column(Float, nullable=False)
    total_score_earned = Column(Float, nullable=False, default=0.0)
    final_calculated_score = Column(Float, nullable=False, default=0.0)
    duration_seconds = Column(Integer, nullable=False, default=0)
    is_completed = Column(Boolean, nullable=False, default=False, index=True)
    pass_status = Column(String(10))
    created_at = Column(TIMESTAMP, server_default=func.now())

    def __repr__(self):
        return (
            f"<QuizSession(id={self.id}, quiz_id={self.quiz_id}, "
            f"attempt={self.attempt_number}, completed={self.is_completed})>"
        )
