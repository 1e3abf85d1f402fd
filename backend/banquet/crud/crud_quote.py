from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import logging

from .. import models
from ..models.invoice import InvoiceStatus
from ..models.quote import QuoteRequestStatus, QuoteStatus
from ..utils.errors import Conflict
from .base import compare_and_set, paginate

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def calculate_total(items: Iterable) -> Decimal:
    """Return Σ quantity × unit_price, rounded to cents."""
    total = Decimal("0")
    for item in items:
        total += Decimal(item.quantity) * Decimal(str(item.unit_price))
    return total.quantize(CENTS)


def _build_items(items: Iterable) -> list:
    return [
        models.QuoteItem(
            item_name=item.item_name,
            description=item.description,
            quantity=item.quantity,
            unit_price=item.unit_price,
        )
        for item in items
    ]


# Quote requests

def create_quote_request(db: Session, user_id: str, data: dict) -> models.QuoteRequest:
    request = models.QuoteRequest(user_id=user_id, status=QuoteRequestStatus.PENDING, **data)
    db.add(request)
    db.commit()
    db.refresh(request)
    return request


def get_quote_request(db: Session, request_id: int) -> Optional[models.QuoteRequest]:
    return db.get(models.QuoteRequest, request_id)


def list_quote_requests(
    db: Session,
    page: int,
    limit: int,
    user_id: Optional[str] = None,
    service_provider_id: Optional[str] = None,
):
    query = db.query(models.QuoteRequest)
    if user_id is not None and service_provider_id is not None:
        query = query.filter(
            or_(
                models.QuoteRequest.user_id == user_id,
                models.QuoteRequest.service_provider_id == service_provider_id,
            )
        )
    elif user_id is not None:
        query = query.filter(models.QuoteRequest.user_id == user_id)
    elif service_provider_id is not None:
        query = query.filter(models.QuoteRequest.service_provider_id == service_provider_id)
    return paginate(query.order_by(models.QuoteRequest.id.desc()), page, limit)


# Quotes

def create_quote(
    db: Session,
    fields: dict,
    items: Iterable,
    quote_request: Optional[models.QuoteRequest] = None,
) -> models.Quote:
    items = list(items)
    quote = models.Quote(
        status=QuoteStatus.DRAFT,
        total_amount=calculate_total(items),
        items=_build_items(items),
        **fields,
    )
    if quote_request is not None:
        quote.quote_request_id = quote_request.id
        quote_request.status = QuoteRequestStatus.QUOTED
    db.add(quote)
    db.commit()
    db.refresh(quote)
    return quote


def get_quote(db: Session, quote_id: int) -> Optional[models.Quote]:
    return db.get(models.Quote, quote_id)


def list_quotes(
    db: Session,
    page: int,
    limit: int,
    user_id: Optional[str] = None,
    service_provider_id: Optional[str] = None,
    status: Optional[QuoteStatus] = None,
):
    query = db.query(models.Quote)
    if user_id is not None:
        query = query.filter(models.Quote.user_id == user_id)
    if service_provider_id is not None:
        query = query.filter(models.Quote.service_provider_id == service_provider_id)
    if status is not None:
        query = query.filter(models.Quote.status == status)
    return paginate(query.order_by(models.Quote.id.desc()), page, limit)


def update_quote(db: Session, quote: models.Quote, changes: dict, items: Optional[Iterable] = None) -> models.Quote:
    for key, value in changes.items():
        setattr(quote, key, value)
    if items is not None:
        items = list(items)
        quote.items = _build_items(items)
        quote.total_amount = calculate_total(items)
    db.commit()
    db.refresh(quote)
    return quote


def set_quote_status(
    db: Session,
    quote: models.Quote,
    expected: QuoteStatus,
    new: QuoteStatus,
    mirror: Optional[QuoteRequestStatus] = None,
) -> models.Quote:
    """Compare-and-set a quote's status, mirroring into its request."""
    if not compare_and_set(db, quote, expected, {"status": new}):
        db.rollback()
        raise Conflict("Quote was modified concurrently, please retry")
    if mirror is not None and quote.quote_request is not None:
        quote.quote_request.status = mirror
    db.commit()
    db.refresh(quote)
    return quote


def mark_viewed(db: Session, quote: models.Quote) -> models.Quote:
    # Losing the race to another transition leaves the newer status in place
    if compare_and_set(db, quote, QuoteStatus.SENT, {"status": QuoteStatus.VIEWED}):
        db.commit()
    else:
        db.rollback()
    db.refresh(quote)
    return quote


def expire_quote(db: Session, quote: models.Quote) -> models.Quote:
    expected = quote.status
    if compare_and_set(db, quote, expected, {"status": QuoteStatus.EXPIRED}):
        if quote.quote_request is not None:
            quote.quote_request.status = QuoteRequestStatus.EXPIRED
        db.commit()
    else:
        db.rollback()
    db.refresh(quote)
    return quote


def create_invoice_from_quote(db: Session, quote: models.Quote, due_date: datetime) -> models.Invoice:
    """Create a pending invoice from an accepted quote and mark it invoiced.

    Invoice, items and quote status commit together or not at all.
    """
    invoice = models.Invoice(
        quote_id=quote.id,
        service_provider_id=quote.service_provider_id,
        user_id=quote.user_id,
        customer_name=quote.customer_name,
        customer_email=quote.customer_email,
        service_date=quote.service_date,
        total_amount=quote.total_amount,
        status=InvoiceStatus.PENDING,
        due_date=due_date,
        items=[
            models.InvoiceItem(
                item_name=item.item_name,
                description=item.description,
                quantity=item.quantity,
                unit_price=item.unit_price,
            )
            for item in quote.items
        ],
    )
    try:
        db.add(invoice)
        db.flush()
        if not compare_and_set(db, quote, QuoteStatus.ACCEPTED, {"status": QuoteStatus.INVOICED}):
            raise Conflict("Quote was modified concurrently, please retry")
        db.commit()
    except (Conflict, SQLAlchemyError):
        db.rollback()
        logger.warning("Rolled back invoice creation for quote %s", quote.id)
        raise
    db.refresh(invoice)
    db.refresh(quote)
    return invoice


def expire_stale_quotes(db: Session, now: datetime) -> list:
    """Mark sent/viewed quotes past ``valid_until`` as expired."""
    stale = (
        db.query(models.Quote)
        .filter(
            models.Quote.status.in_([QuoteStatus.SENT, QuoteStatus.VIEWED]),
            models.Quote.valid_until < now,
        )
        .all()
    )
    for quote in stale:
        quote.status = QuoteStatus.EXPIRED
        if quote.quote_request is not None:
            quote.quote_request.status = QuoteRequestStatus.EXPIRED
    if stale:
        db.commit()
    return stale
