import enum

from sqlalchemy import Column, Integer, String, Text, DateTime

from .base import BaseModel
from .types import CaseInsensitiveEnum


class NotificationStatus(str, enum.Enum):
    SENT = "sent"
    FAILED = "failed"


class Notification(BaseModel):
    __tablename__ = "notifications"

    id           = Column(Integer, primary_key=True, index=True)
    to           = Column(String, nullable=False, index=True)
    recipient_id = Column(String(64), nullable=True, index=True)
    subject      = Column(String, nullable=False)
    message      = Column(Text, nullable=False)
    status       = Column(CaseInsensitiveEnum(NotificationStatus, name="notificationstatus"), nullable=False)
    created_by   = Column(String(64), nullable=True, index=True)
    read_at      = Column(DateTime, nullable=True)
