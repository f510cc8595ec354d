"""
Notification trigger - persists inbox entries for graded sessions

Delivery is fire-and-forget: failures are logged and never propagate to
the operation that triggered them.
"""
import logging
from typing import Any, List, Optional

from sqlalchemy.orm import Session

from quizhub.exceptions import ForbiddenError, NotFoundError
from quizhub.models import Notification
from quizhub.models.enums import NotificationStatus, NotificationType
from quizhub.repositories import NotificationRepository
from quizhub.utils.ids import parse_id

logger = logging.getLogger(__name__)


class NotificationService:

    def notify(
        self,
        db: Session,
        recipient_id: Any,
        type: NotificationType,
        message: str,
        related_entity_id: Optional[Any] = None,
        related_entity_type: Optional[str] = None
    ) -> Optional[Notification]:
        """
        Create a notification for one recipient

        Returns:
            The stored notification, or None if it could not be stored
        """
        try:
            notification = Notification(
                recipient_id=parse_id(recipient_id, "recipient ID"),
                type=type.value,
                message=message,
                related_entity_id=parse_id(related_entity_id) if related_entity_id else None,
                related_entity_type=related_entity_type,
                status=NotificationStatus.UNREAD.value,
            )
            return NotificationRepository(db).create(notification)
        except Exception as e:
            logger.error(f"Failed to notify {recipient_id} ({type.value}): {str(e)}")
            return None

    def list_for_user(
        self,
        db: Session,
        user_id: Any,
        status: Optional[NotificationStatus] = None,
        page: int = 1,
        limit: int = 10
    ) -> List[Notification]:
        filters = {"recipient_id": parse_id(user_id, "user ID")}
        if status:
            filters["status"] = status.value
        return NotificationRepository(db).find_many(
            filters, page=page, limit=limit, order_by=Notification.created_at.desc()
        )

    def mark_read(self, db: Session, notification_id: Any, user_id: Any) -> Notification:
        repository = NotificationRepository(db)
        notification = repository.find_by_id(parse_id(notification_id, "notification ID"))
        if not notification:
            raise NotFoundError("Notification not found.")
        if notification.recipient_id != parse_id(user_id, "user ID"):
            raise ForbiddenError("Not authorized to update this notification.")

        notification.status = NotificationStatus.READ.value
        return repository.save(notification)


# Global instance
notification_service = NotificationService()
