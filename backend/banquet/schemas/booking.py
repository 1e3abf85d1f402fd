import datetime as dt
from typing import Any, List, Optional

from pydantic import AliasChoices, ConfigDict, Field

from ..models.booking import BookingStatus
from ..models.venue import PricingType
from .common import CamelModel, Money, Pagination


class BookingCreate(CamelModel):
    """Raw booking request.

    Fields are deliberately loose; the pricing engine validates them in a
    fixed order so the first failing field is the one reported. Any
    ``totalPrice`` or ``status`` sent by the client is dropped.
    """

    model_config = ConfigDict(extra="ignore")

    user_id: Any = None
    venue_id: Any = None
    vendor_id: Any = None
    date: Any = None
    guest_count: Any = Field(
        default=None,
        validation_alias=AliasChoices("guestCount", "guests", "guest_count"),
    )
    pricing_type: Any = None
    flat_price: Any = None
    per_head_price: Any = None
    min_guests: Any = None
    additional_services: Any = None


class BookingStatusUpdate(CamelModel):
    status: Any = None


class BookingDelete(CamelModel):
    reason: Optional[str] = None


class AdditionalServiceRead(CamelModel):
    name: Optional[str] = None
    price: float = 0


class BookingRead(CamelModel):
    id: int
    user_id: str
    venue_id: int
    vendor_id: str
    date: dt.date
    guest_count: int
    pricing_type: PricingType
    flat_price: Optional[Money] = None
    per_head_price: Optional[Money] = None
    min_guests: Optional[int] = None
    additional_services: List[AdditionalServiceRead] = []
    total_price: Money
    status: BookingStatus
    deleted_by: Optional[str] = None
    deleted_at: Optional[dt.datetime] = None
    deletion_reason: Optional[str] = None
    created_at: dt.datetime
    updated_at: dt.datetime


class BookingList(CamelModel):
    bookings: List[BookingRead]
    pagination: Pagination


class BookingDeleted(CamelModel):
    message: str = "Booking successfully deleted"
    success: bool = True
    booking: BookingRead
