import enum

from sqlalchemy import Column, Integer, String, Text, DateTime, Numeric, ForeignKey
from sqlalchemy.orm import relationship

from .base import BaseModel
from .types import CaseInsensitiveEnum


class QuoteRequestStatus(str, enum.Enum):
    PENDING = "pending"
    QUOTED = "quoted"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXPIRED = "expired"


class QuoteStatus(str, enum.Enum):
    DRAFT = "draft"
    SENT = "sent"
    VIEWED = "viewed"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXPIRED = "expired"
    INVOICED = "invoiced"


class QuoteRequest(BaseModel):
    __tablename__ = "quote_requests"

    id                  = Column(Integer, primary_key=True, index=True)
    user_id             = Column(String(64), nullable=False, index=True)
    service_provider_id = Column(String(64), nullable=False, index=True)
    service_date        = Column(DateTime, nullable=False)
    description         = Column(Text, nullable=False)
    customer_name       = Column(String, nullable=False)
    customer_email      = Column(String, nullable=False)
    customer_phone      = Column(String, nullable=True)
    status              = Column(
        CaseInsensitiveEnum(QuoteRequestStatus, name="quoterequeststatus"),
        nullable=False,
        default=QuoteRequestStatus.PENDING,
    )


class Quote(BaseModel):
    __tablename__ = "quotes"

    id                  = Column(Integer, primary_key=True, index=True)
    quote_request_id    = Column(Integer, ForeignKey("quote_requests.id", ondelete="SET NULL"), nullable=True)
    service_provider_id = Column(String(64), nullable=False, index=True)
    user_id             = Column(String(64), nullable=False, index=True)
    customer_name       = Column(String, nullable=False)
    customer_email      = Column(String, nullable=False)
    service_date        = Column(DateTime, nullable=False)
    note                = Column(Text, nullable=True)
    total_amount        = Column(Numeric(10, 2), nullable=False)
    status              = Column(
        CaseInsensitiveEnum(QuoteStatus, name="quotestatus"),
        nullable=False,
        default=QuoteStatus.DRAFT,
        index=True,
    )
    valid_until         = Column(DateTime, nullable=False)

    items = relationship(
        "QuoteItem",
        back_populates="quote",
        cascade="all, delete-orphan",
        order_by="QuoteItem.id",
    )
    quote_request = relationship("QuoteRequest")


class QuoteItem(BaseModel):
    __tablename__ = "quote_items"

    id          = Column(Integer, primary_key=True, index=True)
    quote_id    = Column(Integer, ForeignKey("quotes.id", ondelete="CASCADE"), nullable=False, index=True)
    item_name   = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    quantity    = Column(Integer, nullable=False, default=1)
    unit_price  = Column(Numeric(10, 2), nullable=False)

    quote = relationship("Quote", back_populates="items")
