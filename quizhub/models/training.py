"""
Training model - a course grouping chapters, quizzes and assigned teachers
"""
from sqlalchemy import Column, String, TIMESTAMP, Table, ForeignKey, Uuid, func
from sqlalchemy.orm import relationship
from quizhub.database import Base, JSONDocument
import uuid


training_teachers = Table(
    "training_teachers",
    Base.metadata,
    Column("training_id", Uuid, ForeignKey("trainings.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True),
)


class Training(Base):
    """
    Trainings table - teachers assigned here can see sessions of the training's quizzes
    """
    __tablename__ = "trainings"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(JSONDocument, nullable=False)  # {"en": "...", "fr": "..."}
    slug = Column(String(255), unique=True, nullable=False, index=True)
    created_at = Column(TIMESTAMP, server_default=func.now())

    teachers = relationship("User", secondary=training_teachers, lazy="selectin")

    @property
    def teacher_ids(self):
        return [teacher.id for teacher in self.teachers]

    def __repr__(self):
        return f"<Training(id={self.id}, slug={self.slug})>"
