"""
Quiz model - a scored selection of questions belonging to a training
"""
from sqlalchemy import Column, String, Integer, Float, Boolean, TIMESTAMP, ForeignKey, Uuid, func
from quizhub.database import Base, JSONDocument
import uuid


class Quiz(Base):
    """
    Quizzes table - `questions` holds the ordered manifest
    [{"question_id": "<uuid>", "score": 1.0}, ...]
    """
    __tablename__ = "quizzes"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    training_id = Column(Uuid, ForeignKey("trainings.id"), nullable=False, index=True)
    creator_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(JSONDocument, nullable=False)
    description = Column(JSONDocument)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    thumbnail_url = Column(String(500))
    quiz_type = Column(String(20), nullable=False)
    is_published = Column(Boolean, nullable=False, default=False)
    published_at = Column(TIMESTAMP(timezone=True))
    is_public = Column(Boolean, nullable=False, default=False)
    deadline = Column(TIMESTAMP(timezone=True))
    duration_minutes = Column(Integer)
    allowed_attempts = Column(Integer)  # unbounded when NULL
    global_score = Column(Float, nullable=False)
    tags = Column(JSONDocument, default=list)
    questions = Column(JSONDocument, nullable=False)
    created_at = Column(TIMESTAMP, server_default=func.now())

    @property
    def max_possible_score(self) -> float:
        return sum(entry.get("score", 1.0) for entry in self.questions or [])

    def __repr__(self):
        return f"<Quiz(id={self.id}, slug={self.slug}, type={self.quiz_type})>"
