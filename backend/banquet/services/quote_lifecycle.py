"""Quote, invoice and service-order lifecycles.

Quote:          draft -> sent -> viewed -> {accepted, rejected, expired}
                sent -> {accepted, rejected, expired}; accepted -> invoiced
Invoice:        pending -> {paid, overdue, cancelled}; overdue -> {paid, cancelled}
Service order:  confirmed -> in_progress -> completed; confirmed|in_progress -> cancelled
"""

from datetime import datetime, timedelta
from typing import Any, Optional
import logging

from sqlalchemy.orm import Session

from .. import models
from ..auth.principal import Principal, Role
from ..crud import crud_invoice, crud_quote
from ..models.invoice import InvoiceStatus
from ..models.quote import QuoteRequestStatus, QuoteStatus
from ..models.service_order import ServiceOrderStatus
from ..schemas.common import reject_nulls
from ..schemas.quote import QuoteCreate, QuoteUpdate
from ..utils.dates import to_naive_utc
from ..utils.errors import Expired, Forbidden, InvalidStatus, NotFound, ValidationError
from . import policy

logger = logging.getLogger(__name__)

QUOTE_TRANSITIONS = {
    QuoteStatus.DRAFT: {QuoteStatus.SENT},
    QuoteStatus.SENT: {QuoteStatus.VIEWED, QuoteStatus.ACCEPTED, QuoteStatus.REJECTED, QuoteStatus.EXPIRED},
    QuoteStatus.VIEWED: {QuoteStatus.ACCEPTED, QuoteStatus.REJECTED, QuoteStatus.EXPIRED},
    QuoteStatus.ACCEPTED: {QuoteStatus.INVOICED},
}

INVOICE_TRANSITIONS = {
    InvoiceStatus.PENDING: {InvoiceStatus.PAID, InvoiceStatus.OVERDUE, InvoiceStatus.CANCELLED},
    InvoiceStatus.OVERDUE: {InvoiceStatus.PAID, InvoiceStatus.CANCELLED},
}

SERVICE_ORDER_TRANSITIONS = {
    ServiceOrderStatus.CONFIRMED: {ServiceOrderStatus.IN_PROGRESS, ServiceOrderStatus.CANCELLED},
    ServiceOrderStatus.IN_PROGRESS: {ServiceOrderStatus.COMPLETED, ServiceOrderStatus.CANCELLED},
}

RESPONSE_MIRROR = {
    QuoteStatus.ACCEPTED: QuoteRequestStatus.ACCEPTED,
    QuoteStatus.REJECTED: QuoteRequestStatus.REJECTED,
}


def ensure_transition(transitions: dict, current, target) -> None:
    if target not in transitions.get(current, set()):
        raise InvalidStatus(current, target)


def _naive(value: Optional[datetime]) -> Optional[datetime]:
    return to_naive_utc(value) if value is not None else None


def _require_provider_owner(principal: Principal, record, action: str) -> None:
    if not policy.is_service_provider_owner(principal, record):
        raise Forbidden(f"Only the owning service provider can {action}")


# Quote requests

def create_quote_request(db: Session, principal: Principal, data: dict) -> models.QuoteRequest:
    if principal.role not in (Role.USER, Role.ADMIN):
        raise Forbidden("Only users can request quotes")
    request = crud_quote.create_quote_request(db, principal.id, data)
    logger.info("Quote request created", extra={"quote_request_id": request.id, "principal_id": principal.id})
    return request


# Quotes

def create_quote(db: Session, principal: Principal, payload: QuoteCreate, now: datetime, validity_days: int) -> models.Quote:
    if principal.role != Role.SERVICE_PROVIDER:
        raise Forbidden("Only service providers can create quotes")

    request = None
    if payload.quote_request_id is not None:
        request = crud_quote.get_quote_request(db, payload.quote_request_id)
        if request is None:
            raise NotFound("Quote request not found")
        if not policy.is_service_provider_owner(principal, request):
            raise Forbidden("Quote request is addressed to another service provider")
        if request.status not in (QuoteRequestStatus.PENDING, QuoteRequestStatus.QUOTED):
            raise InvalidStatus(request.status, QuoteRequestStatus.QUOTED)

    fields = {
        "service_provider_id": principal.id,
        "user_id": payload.user_id or (request.user_id if request else None),
        "customer_name": payload.customer_name or (request.customer_name if request else None),
        "customer_email": payload.customer_email or (request.customer_email if request else None),
        "service_date": _naive(payload.service_date) or (request.service_date if request else None),
        "note": payload.note,
        "valid_until": _naive(payload.valid_until) or now + timedelta(days=validity_days),
    }
    for key, field in (
        ("user_id", "userId"),
        ("customer_name", "customerName"),
        ("customer_email", "customerEmail"),
        ("service_date", "serviceDate"),
    ):
        if not fields[key]:
            raise ValidationError(field, f"{field} is required")
    if fields["valid_until"] <= now:
        raise ValidationError("validUntil", "validUntil must be in the future")

    quote = crud_quote.create_quote(db, fields, payload.items, request)
    logger.info("Quote created", extra={"quote_id": quote.id, "principal_id": principal.id})
    return quote


def update_quote(
    db: Session,
    principal: Principal,
    quote: models.Quote,
    payload: QuoteUpdate,
    now: datetime,
) -> models.Quote:
    if not (principal.is_admin or policy.is_service_provider_owner(principal, quote)):
        raise Forbidden("Only the owning service provider can edit this quote")
    if quote.status != QuoteStatus.DRAFT and not principal.is_admin:
        raise InvalidStatus(quote.status, QuoteStatus.DRAFT, "Only draft quotes can be edited")
    changes = payload.model_dump(exclude_unset=True, exclude={"items"})
    reject_nulls(changes, ("service_date", "valid_until"))
    for key in ("service_date", "valid_until"):
        if changes.get(key) is not None:
            changes[key] = to_naive_utc(changes[key])
    if "valid_until" in changes and changes["valid_until"] <= now:
        raise ValidationError("validUntil", "validUntil must be in the future")
    return crud_quote.update_quote(db, quote, changes, payload.items)


def view_quote(db: Session, principal: Principal, quote: models.Quote) -> models.Quote:
    """Return the quote, recording that the addressed user has seen it."""
    if policy.is_addressed_user(principal, quote) and quote.status == QuoteStatus.SENT:
        quote = crud_quote.mark_viewed(db, quote)
    return quote


def send_quote(db: Session, principal: Principal, quote: models.Quote) -> models.Quote:
    _require_provider_owner(principal, quote, "send this quote")
    ensure_transition({QuoteStatus.DRAFT: {QuoteStatus.SENT}}, quote.status, QuoteStatus.SENT)
    quote = crud_quote.set_quote_status(db, quote, QuoteStatus.DRAFT, QuoteStatus.SENT)
    logger.info("Quote sent", extra={"quote_id": quote.id})
    return quote


def respond_to_quote(
    db: Session,
    principal: Principal,
    quote: models.Quote,
    target: QuoteStatus,
    now: datetime,
) -> models.Quote:
    """Accept or reject ``quote`` on behalf of the addressed user.

    A quote past ``valid_until`` is persisted as expired and the response
    fails with Expired.
    """
    if not policy.is_addressed_user(principal, quote):
        raise Forbidden("Only the addressed user can respond to this quote")
    if quote.status == QuoteStatus.EXPIRED:
        raise Expired("Quote has expired")
    if quote.status not in (QuoteStatus.SENT, QuoteStatus.VIEWED):
        raise InvalidStatus(quote.status, target)
    if quote.valid_until < now:
        crud_quote.expire_quote(db, quote)
        logger.info("Quote expired on response", extra={"quote_id": quote.id})
        raise Expired("Quote has expired")
    quote = crud_quote.set_quote_status(db, quote, quote.status, target, RESPONSE_MIRROR.get(target))
    logger.info("Quote %s", target.value, extra={"quote_id": quote.id, "principal_id": principal.id})
    return quote


def invoice_quote(
    db: Session,
    principal: Principal,
    quote: models.Quote,
    now: datetime,
    due_days: int,
) -> models.Invoice:
    _require_provider_owner(principal, quote, "invoice this quote")
    if quote.status != QuoteStatus.ACCEPTED:
        raise InvalidStatus(quote.status, QuoteStatus.INVOICED)
    invoice = crud_quote.create_invoice_from_quote(db, quote, now + timedelta(days=due_days))
    logger.info("Invoice created from quote", extra={"quote_id": quote.id, "invoice_id": invoice.id})
    return invoice


# Invoices

def pay_invoice(
    db: Session,
    principal: Principal,
    invoice: models.Invoice,
    now: datetime,
    payment_reference: Optional[str] = None,
) -> models.ServiceOrder:
    if not principal.is_admin:
        raise Forbidden("Only the payment processor can record payments")
    ensure_transition(INVOICE_TRANSITIONS, invoice.status, InvoiceStatus.PAID)
    order = crud_invoice.record_payment(db, invoice, now, payment_reference)
    logger.info("Invoice paid", extra={"invoice_id": invoice.id, "service_order_id": order.id})
    return order


def cancel_invoice(db: Session, principal: Principal, invoice: models.Invoice) -> models.Invoice:
    if not (principal.is_admin or policy.is_service_provider_owner(principal, invoice)):
        raise Forbidden("Only the owning service provider can cancel this invoice")
    ensure_transition(INVOICE_TRANSITIONS, invoice.status, InvoiceStatus.CANCELLED)
    invoice = crud_invoice.set_invoice_status(db, invoice, InvoiceStatus.CANCELLED)
    logger.info("Invoice cancelled", extra={"invoice_id": invoice.id, "principal_id": principal.id})
    return invoice


# Service orders

def parse_service_order_status(value: Any) -> ServiceOrderStatus:
    try:
        return ServiceOrderStatus(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(s.value for s in ServiceOrderStatus)
        raise ValidationError("status", f"Invalid status. Must be one of: {allowed}")


def change_service_order_status(
    db: Session,
    principal: Principal,
    order: models.ServiceOrder,
    raw_status: Any,
) -> models.ServiceOrder:
    if not (principal.is_admin or policy.is_service_provider_owner(principal, order)):
        raise Forbidden("Only the owning service provider can update this order")
    target = parse_service_order_status(raw_status)
    if target == order.status:
        return order
    ensure_transition(SERVICE_ORDER_TRANSITIONS, order.status, target)
    order = crud_invoice.set_service_order_status(db, order, target)
    logger.info("Service order status changed", extra={"service_order_id": order.id, "to_status": target.value})
    return order
