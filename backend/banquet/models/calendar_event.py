from sqlalchemy import Column, Integer, String, Date, Boolean, ForeignKey

from .base import BaseModel


class CalendarEvent(BaseModel):
    __tablename__ = "calendar_events"

    id           = Column(Integer, primary_key=True, index=True)
    venue_id     = Column(Integer, nullable=False, index=True)
    date         = Column(Date, nullable=False, index=True)
    is_available = Column(Boolean, nullable=False, default=True)
    booking_id   = Column(Integer, ForeignKey("bookings.id", ondelete="SET NULL"), nullable=True)
    created_by   = Column(String(64), nullable=True)
