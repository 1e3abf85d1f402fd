import enum

from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship

from .base import BaseModel
from .types import CaseInsensitiveEnum


class ServiceOrderStatus(str, enum.Enum):
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ServiceOrder(BaseModel):
    __tablename__ = "service_orders"

    id                  = Column(Integer, primary_key=True, index=True)
    invoice_id          = Column(Integer, ForeignKey("invoices.id"), nullable=False, unique=True)
    service_provider_id = Column(String(64), nullable=False, index=True)
    user_id             = Column(String(64), nullable=False, index=True)
    status              = Column(
        CaseInsensitiveEnum(ServiceOrderStatus, name="serviceorderstatus"),
        nullable=False,
        default=ServiceOrderStatus.CONFIRMED,
    )

    invoice = relationship("Invoice", back_populates="service_order")
