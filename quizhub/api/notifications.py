"""
Notification inbox API endpoints
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from quizhub.api.deps import Pagination, get_current_user
from quizhub.database import get_db
from quizhub.models import User
from quizhub.models.enums import NotificationStatus
from quizhub.schemas.notification import NotificationResponse
from quizhub.services.notification_service import notification_service


router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=List[NotificationResponse])
async def list_notifications(
    status: Optional[NotificationStatus] = Query(None),
    pagination: Pagination = Depends(),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Caller's notifications, newest first"""
    notifications = notification_service.list_for_user(
        db, current_user.id, status, page=pagination.page, limit=pagination.limit
    )
    return [NotificationResponse.model_validate(notification) for notification in notifications]


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    notification = notification_service.mark_read(db, notification_id, current_user.id)
    return NotificationResponse.model_validate(notification)
