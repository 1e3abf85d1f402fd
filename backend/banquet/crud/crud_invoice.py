from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import logging

from .. import models
from ..models.invoice import InvoiceStatus
from ..models.service_order import ServiceOrderStatus
from ..utils.errors import Conflict
from .base import compare_and_set, paginate

logger = logging.getLogger(__name__)


def get_invoice(db: Session, invoice_id: int) -> Optional[models.Invoice]:
    return db.get(models.Invoice, invoice_id)


def list_invoices(
    db: Session,
    page: int,
    limit: int,
    user_id: Optional[str] = None,
    service_provider_id: Optional[str] = None,
    status: Optional[InvoiceStatus] = None,
):
    query = db.query(models.Invoice)
    if user_id is not None:
        query = query.filter(models.Invoice.user_id == user_id)
    if service_provider_id is not None:
        query = query.filter(models.Invoice.service_provider_id == service_provider_id)
    if status is not None:
        query = query.filter(models.Invoice.status == status)
    return paginate(query.order_by(models.Invoice.id.desc()), page, limit)


def set_invoice_status(db: Session, invoice: models.Invoice, new: InvoiceStatus) -> models.Invoice:
    if not compare_and_set(db, invoice, invoice.status, {"status": new}):
        db.rollback()
        raise Conflict("Invoice was modified concurrently, please retry")
    db.commit()
    db.refresh(invoice)
    return invoice


def record_payment(
    db: Session,
    invoice: models.Invoice,
    paid_at: datetime,
    payment_reference: Optional[str] = None,
) -> models.ServiceOrder:
    """Mark ``invoice`` paid and open its service order in one transaction."""
    order = models.ServiceOrder(
        invoice_id=invoice.id,
        service_provider_id=invoice.service_provider_id,
        user_id=invoice.user_id,
        status=ServiceOrderStatus.CONFIRMED,
    )
    try:
        values = {"status": InvoiceStatus.PAID, "paid_at": paid_at, "payment_reference": payment_reference}
        if not compare_and_set(db, invoice, invoice.status, values):
            raise Conflict("Invoice was modified concurrently, please retry")
        db.add(order)
        db.commit()
    except (Conflict, SQLAlchemyError):
        db.rollback()
        logger.warning("Rolled back payment for invoice %s", invoice.id)
        raise
    db.refresh(invoice)
    db.refresh(order)
    return order


def mark_overdue_invoices(db: Session, now: datetime) -> list:
    overdue = (
        db.query(models.Invoice)
        .filter(models.Invoice.status == InvoiceStatus.PENDING, models.Invoice.due_date < now)
        .all()
    )
    for invoice in overdue:
        invoice.status = InvoiceStatus.OVERDUE
    if overdue:
        db.commit()
    return overdue


# Service orders

def get_service_order(db: Session, order_id: int) -> Optional[models.ServiceOrder]:
    return db.get(models.ServiceOrder, order_id)


def set_service_order_status(
    db: Session,
    order: models.ServiceOrder,
    new: ServiceOrderStatus,
) -> models.ServiceOrder:
    if not compare_and_set(db, order, order.status, {"status": new}):
        db.rollback()
        raise Conflict("Service order was modified concurrently, please retry")
    db.commit()
    db.refresh(order)
    return order
