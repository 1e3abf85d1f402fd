from datetime import datetime
from typing import List, Optional

from pydantic import Field

from ..models.notification import NotificationStatus
from .common import CamelModel, IdStr, Pagination


class NotificationSend(CamelModel):
    to: str = Field(min_length=3)
    subject: str
    message: str


class NotificationCreate(CamelModel):
    user_id: IdStr
    subject: str
    message: str


class NotificationRead(CamelModel):
    id: int
    to: str
    recipient_id: Optional[str] = None
    subject: str
    message: str
    status: NotificationStatus
    created_by: Optional[str] = None
    read_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class NotificationList(CamelModel):
    notifications: List[NotificationRead]
    pagination: Pagination
