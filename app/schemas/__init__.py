from app.schemas.notification import (
    NotificationType,
    NotificationResponse,
    NotificationListResponse,
    MarkReadRequest,
    MarkReadResponse,
)
from app.schemas.device_token import RegisterDeviceRequest, DeviceResponse
from app.schemas.item import ItemCreate, ItemResponse, ItemDeleteRequest
from app.schemas.push import SendPushRequest

__all__ = [
    "NotificationType",
    "NotificationResponse",
    "NotificationListResponse",
    "MarkReadRequest",
    "MarkReadResponse",
    "RegisterDeviceRequest",
    "DeviceResponse",
    "ItemCreate",
    "ItemResponse",
    "ItemDeleteRequest",
    "SendPushRequest",
]
