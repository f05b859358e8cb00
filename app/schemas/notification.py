"""
Schemas Pydantic para notificações
"""
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Dict, Any
from datetime import datetime


class NotificationType(str, Enum):
    NEW_LISTING = "new_listing"
    POST_DELETED = "post_deleted"
    SYSTEM_ALERT = "system_alert"


class NotificationResponse(BaseModel):
    id: Optional[int] = None
    user_id: str
    type: str
    title: str
    body: str
    payload: Optional[Dict[str, Any]] = None
    is_read: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    # Igualdade apenas por id; registros sem id nunca são iguais entre si
    def __eq__(self, other):
        if self is other:
            return True
        if not isinstance(other, NotificationResponse):
            return NotImplemented
        return self.id is not None and self.id == other.id

    def __hash__(self):
        if self.id is None:
            return id(self)
        return hash(self.id)


class NotificationListResponse(BaseModel):
    notifications: List[NotificationResponse]
    unread_count: int


class UnreadCountResponse(BaseModel):
    unread_count: int


class MarkReadRequest(BaseModel):
    notification_ids: List[int] = Field(..., min_length=1, max_length=200)


class MarkReadResponse(BaseModel):
    success: bool
    marked_count: int
