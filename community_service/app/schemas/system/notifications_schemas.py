from datetime import datetime
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel

from shared.utils.enums import NotificationActionType


class NotificationAction(BaseModel):
    type: NotificationActionType
    organization_id: Optional[int] = None
    requester_id: Optional[int] = None
    invitation_id: Optional[UUID] = None


class NotificationOut(BaseModel):
    id: int
    recipient_phone: Optional[str] = None
    sender: str
    subject: str
    body: str
    posted_date: datetime
    read: bool
    action: Optional[NotificationAction] = None

    model_config = {"from_attributes": True}


class NotificationListResponse(BaseModel):
    notifications: List[NotificationOut]
    total: int


class UnreadCount(BaseModel):
    unread: int
