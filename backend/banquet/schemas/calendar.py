import datetime as dt
from typing import List, Optional

from .common import CamelModel, Pagination


class CalendarEventCreate(CamelModel):
    venue_id: int
    date: dt.date
    is_available: bool = True
    booking_id: Optional[int] = None


class CalendarEventUpdate(CamelModel):
    venue_id: Optional[int] = None
    date: Optional[dt.date] = None
    is_available: Optional[bool] = None
    booking_id: Optional[int] = None


class CalendarEventRead(CamelModel):
    id: int
    venue_id: int
    date: dt.date
    is_available: bool
    booking_id: Optional[int] = None
    created_by: Optional[str] = None
    created_at: dt.datetime
    updated_at: dt.datetime


class CalendarEventList(CamelModel):
    events: List[CalendarEventRead]
    pagination: Pagination


class AvailabilityDay(CamelModel):
    date: dt.date
    is_available: bool
    event_id: Optional[int] = None


class AvailabilityRead(CamelModel):
    venue_id: int
    start_date: dt.date
    end_date: dt.date
    days: List[AvailabilityDay]
