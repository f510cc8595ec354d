"""
Chapter model - groups the questions of a training
"""
from sqlalchemy import Column, Integer, TIMESTAMP, ForeignKey, Uuid, func
from quizhub.database import Base, JSONDocument
import uuid


class Chapter(Base):
    """
    Chapters table - question pools are drawn per chapter
    """
    __tablename__ = "chapters"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    training_id = Column(Uuid, ForeignKey("trainings.id"), nullable=False, index=True)
    title = Column(JSONDocument, nullable=False)
    order = Column(Integer, default=0)
    created_at = Column(TIMESTAMP, server_default=func.now())

    def __repr__(self):
        return f"<Chapter(id={self.id}, training_id={self.training_id})>"
