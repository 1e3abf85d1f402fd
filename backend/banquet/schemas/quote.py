from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field

from ..models.quote import QuoteRequestStatus, QuoteStatus
from .common import CamelModel, IdStr, Money, Pagination


class QuoteRequestCreate(CamelModel):
    service_provider_id: IdStr
    service_date: datetime
    description: str = Field(min_length=1)
    customer_name: str
    customer_email: str
    customer_phone: Optional[str] = None


class QuoteRequestRead(CamelModel):
    id: int
    user_id: str
    service_provider_id: str
    service_date: datetime
    description: str
    customer_name: str
    customer_email: str
    customer_phone: Optional[str] = None
    status: QuoteRequestStatus
    created_at: datetime
    updated_at: datetime


class QuoteRequestList(CamelModel):
    quote_requests: List[QuoteRequestRead]
    pagination: Pagination


class QuoteItemIn(CamelModel):
    item_name: str = Field(min_length=1)
    description: Optional[str] = None
    quantity: int = Field(default=1, gt=0)
    unit_price: Decimal = Field(ge=0)


class QuoteItemRead(CamelModel):
    id: int
    item_name: str
    description: Optional[str] = None
    quantity: int
    unit_price: Money


class QuoteCreate(CamelModel):
    """A provider's quote.

    When ``quoteRequestId`` is given the customer and service date default
    to the request's; otherwise ``userId``, ``customerName``,
    ``customerEmail`` and ``serviceDate`` are required.
    """

    quote_request_id: Optional[int] = None
    user_id: Optional[IdStr] = None
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    service_date: Optional[datetime] = None
    note: Optional[str] = None
    valid_until: Optional[datetime] = None
    items: List[QuoteItemIn] = Field(min_length=1)


class QuoteUpdate(CamelModel):
    note: Optional[str] = None
    service_date: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    items: Optional[List[QuoteItemIn]] = Field(default=None, min_length=1)


class QuoteRead(CamelModel):
    id: int
    quote_request_id: Optional[int] = None
    service_provider_id: str
    user_id: str
    customer_name: str
    customer_email: str
    service_date: datetime
    note: Optional[str] = None
    total_amount: Money
    status: QuoteStatus
    valid_until: datetime
    items: List[QuoteItemRead] = []
    created_at: datetime
    updated_at: datetime


class QuoteList(CamelModel):
    quotes: List[QuoteRead]
    pagination: Pagination
