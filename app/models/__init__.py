from app.database import Base
from app.models.item import Item
from app.models.profile import Profile
from app.models.notification import Notification
from app.models.device_token import DeviceToken
from app.models.send_log import NotificationSendLog
from app.models.notification_outbox import NotificationOutbox

__all__ = [
    "Base",
    "Item",
    "Profile",
    "Notification",
    "DeviceToken",
    "NotificationSendLog",
    "NotificationOutbox",
]
