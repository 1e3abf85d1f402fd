from datetime import datetime
from typing import List, Optional

from ..models.invoice import InvoiceStatus
from ..models.service_order import ServiceOrderStatus
from .common import CamelModel, Money, Pagination


class InvoiceItemRead(CamelModel):
    id: int
    item_name: str
    description: Optional[str] = None
    quantity: int
    unit_price: Money


class InvoiceRead(CamelModel):
    id: int
    quote_id: Optional[int] = None
    service_provider_id: str
    user_id: str
    customer_name: str
    customer_email: str
    service_date: Optional[datetime] = None
    total_amount: Money
    status: InvoiceStatus
    due_date: datetime
    paid_at: Optional[datetime] = None
    payment_reference: Optional[str] = None
    items: List[InvoiceItemRead] = []
    created_at: datetime
    updated_at: datetime


class InvoiceList(CamelModel):
    invoices: List[InvoiceRead]
    pagination: Pagination


class InvoicePay(CamelModel):
    payment_reference: Optional[str] = None


class ServiceOrderRead(CamelModel):
    id: int
    invoice_id: int
    service_provider_id: str
    user_id: str
    status: ServiceOrderStatus
    created_at: datetime
    updated_at: datetime


class InvoicePaid(CamelModel):
    invoice: InvoiceRead
    service_order: ServiceOrderRead


class ServiceOrderStatusUpdate(CamelModel):
    status: str
