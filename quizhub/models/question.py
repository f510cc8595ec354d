"""
Question model - authoring data including the answer key
"""
from sqlalchemy import Column, String, TIMESTAMP, ForeignKey, Uuid, func
from quizhub.database import Base, JSONDocument
import uuid


class Question(Base):
    """
    Questions table

    Exactly one answer representation is populated per kind:
    `choices` for multiple_choice / true_false, `correct_answer_formula`
    for numeric_formula.
    """
    __tablename__ = "questions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    chapter_id = Column(Uuid, ForeignKey("chapters.id"), nullable=False, index=True)
    text = Column(JSONDocument, nullable=False)  # localized prompt
    kind = Column(String(30), nullable=False, index=True)
    difficulty = Column(String(20), nullable=False, default="medium", index=True)
    media = Column(JSONDocument)  # {"kind": "image", "url": "...", "alt_text": "..."}
    choices = Column(JSONDocument)  # [{"text": {...}, "is_correct": true, "media": {...}}]
    correct_answer_formula = Column(String(200))
    explanation = Column(JSONDocument)
    tags = Column(JSONDocument, default=list)
    created_at = Column(TIMESTAMP, server_default=func.now())

    def __repr__(self):
        return f"<Question(id={self.id}, kind={self.kind})>"
