"""
User model - minimal user directory record
"""
from sqlalchemy import Column, String, TIMESTAMP, Uuid, func
from quizhub.database import Base
import uuid


class User(Base):
    """
    Users table - identity, role and display name used for authorization
    """
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    role = Column(String(20), nullable=False, index=True)  # student | teacher | manager | admin
    display_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True)
    created_at = Column(TIMESTAMP, server_default=func.now())

    def __repr__(self):
        return f"<User(id={self.id}, role={self.role})>"
