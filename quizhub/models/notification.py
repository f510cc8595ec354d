"""
Notification model - persisted inbox entries written by the notification trigger
"""
from sqlalchemy import Column, String, Text, TIMESTAMP, ForeignKey, Uuid, func
from quizhub.database import Base
import uuid


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    recipient_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String(50), nullable=False)
    message = Column(Text, nullable=False)
    related_entity_id = Column(Uuid)
    related_entity_type = Column(String(50))
    status = Column(String(10), nullable=False, default="unread", index=True)
    created_at = Column(TIMESTAMP, server_default=func.now())

    def __repr__(self):
        return f"<Notification(recipient_id={self.recipient_id}, type={self.type}, status={self.status})>"
