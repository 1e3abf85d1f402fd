import enum

from sqlalchemy import Column, Integer, String, Text, DateTime, Numeric, ForeignKey
from sqlalchemy.orm import relationship

from .base import BaseModel
from .types import CaseInsensitiveEnum


class InvoiceStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class Invoice(BaseModel):
    __tablename__ = "invoices"

    id                  = Column(Integer, primary_key=True, index=True)
    quote_id            = Column(Integer, ForeignKey("quotes.id"), nullable=True, unique=True)
    service_provider_id = Column(String(64), nullable=False, index=True)
    user_id             = Column(String(64), nullable=False, index=True)
    customer_name       = Column(String, nullable=False)
    customer_email      = Column(String, nullable=False)
    service_date        = Column(DateTime, nullable=True)
    total_amount        = Column(Numeric(10, 2), nullable=False)
    status              = Column(
        CaseInsensitiveEnum(InvoiceStatus, name="invoicestatus"),
        nullable=False,
        default=InvoiceStatus.PENDING,
        index=True,
    )
    due_date            = Column(DateTime, nullable=False)
    paid_at             = Column(DateTime, nullable=True)
    payment_reference   = Column(String, nullable=True)

    items = relationship(
        "InvoiceItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceItem.id",
    )
    quote = relationship("Quote")
    service_order = relationship("ServiceOrder", back_populates="invoice", uselist=False)


class InvoiceItem(BaseModel):
    __tablename__ = "invoice_items"

    id          = Column(Integer, primary_key=True, index=True)
    invoice_id  = Column(Integer, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)
    item_name   = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    quantity    = Column(Integer, nullable=False, default=1)
    unit_price  = Column(Numeric(10, 2), nullable=False)

    invoice = relationship("Invoice", back_populates="items")
