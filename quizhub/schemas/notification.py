"""
Pydantic schemas for notifications
"""
from pydantic import BaseModel
from typing import Optional
from uuid import UUID
from datetime import datetime

from quizhub.models.enums import NotificationStatus, NotificationType


class NotificationResponse(BaseModel):
    id: UUID
    recipient_id: UUID
    type: NotificationType
    message: str
    related_entity_id: Optional[UUID] = None
    related_entity_type: Optional[str] = None
    status: NotificationStatus
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
