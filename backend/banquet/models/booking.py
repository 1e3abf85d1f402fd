import enum

from sqlalchemy import Column, Integer, String, Date, DateTime, Numeric, ForeignKey, JSON, Index

from .base import BaseModel
from .types import CaseInsensitiveEnum
from .venue import PricingType


class BookingStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class Booking(BaseModel):
    __tablename__ = "bookings"
    __table_args__ = (Index("ix_bookings_venue_date", "venue_id", "date"),)

    id                  = Column(Integer, primary_key=True, index=True)
    user_id             = Column(String(64), nullable=False, index=True)
    # The venue may live in another service's store, so no FK constraint
    venue_id            = Column(Integer, nullable=False)
    vendor_id           = Column(String(64), nullable=False, index=True)
    date                = Column(Date, nullable=False)
    guest_count         = Column(Integer, nullable=False)
    pricing_type        = Column(CaseInsensitiveEnum(PricingType, name="pricingtype"), nullable=False)
    flat_price          = Column(Numeric(10, 2), nullable=True)
    per_head_price      = Column(Numeric(10, 2), nullable=True)
    min_guests          = Column(Integer, nullable=True)
    additional_services = Column(JSON, nullable=False, default=list)
    total_price         = Column(Numeric(10, 2), nullable=False)
    status              = Column(
        CaseInsensitiveEnum(BookingStatus, name="bookingstatus"),
        nullable=False,
        default=BookingStatus.PENDING,
        index=True,
    )
    deleted_by          = Column(String(64), nullable=True)
    deleted_at          = Column(DateTime, nullable=True)
    deletion_reason     = Column(String, nullable=True)
