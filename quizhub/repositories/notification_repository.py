from quizhub.models import Notification
from quizhub.repositories.base import SqlRepository


class NotificationRepository(SqlRepository[Notification]):
    model = Notification
    entity_name = "notification"
