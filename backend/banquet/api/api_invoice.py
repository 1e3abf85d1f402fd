from typing import Optional
import logging

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from .. import models, schemas
from ..auth.principal import Principal
from ..context import AppContext
from ..crud import crud_invoice
from ..services import policy, quote_lifecycle
from ..utils.errors import Forbidden, NotFound
from .api_quote import role_scope
from .dependencies import get_context, get_db, get_principal, page_params

router = APIRouter(tags=["invoices"])
logger = logging.getLogger(__name__)


def _load_invoice(db: Session, principal: Principal, invoice_id: int) -> models.Invoice:
    invoice = crud_invoice.get_invoice(db, invoice_id)
    if invoice is None:
        raise NotFound("Invoice not found")
    if not policy.can_access_invoice(principal, invoice):
        raise Forbidden("Not allowed to access this invoice")
    return invoice


def _load_order(db: Session, principal: Principal, order_id: int) -> models.ServiceOrder:
    order = crud_invoice.get_service_order(db, order_id)
    if order is None:
        raise NotFound("Service order not found")
    if not policy.can_access_invoice(principal, order):
        raise Forbidden("Not allowed to access this service order")
    return order


@router.get("/invoices", response_model=schemas.InvoiceList)
def list_invoices(
    paging: tuple = Depends(page_params),
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    page, limit = paging
    invoices, pagination = crud_invoice.list_invoices(db, page, limit, **role_scope(principal))
    return {"invoices": invoices, "pagination": pagination}


@router.get("/invoices/{invoice_id}", response_model=schemas.InvoiceRead)
def read_invoice(
    invoice_id: int,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    return _load_invoice(db, principal, invoice_id)


@router.post("/invoices/{invoice_id}/pay", response_model=schemas.InvoicePaid)
def pay_invoice(
    invoice_id: int,
    payload: Optional[schemas.InvoicePay] = Body(None),
    principal: Principal = Depends(get_principal),
    ctx: AppContext = Depends(get_context),
    db: Session = Depends(get_db),
):
    invoice = _load_invoice(db, principal, invoice_id)
    order = quote_lifecycle.pay_invoice(
        db,
        principal,
        invoice,
        ctx.now(),
        payload.payment_reference if payload else None,
    )
    return {"invoice": invoice, "service_order": order}


@router.post("/invoices/{invoice_id}/cancel", response_model=schemas.InvoiceRead)
def cancel_invoice(
    invoice_id: int,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    invoice = _load_invoice(db, principal, invoice_id)
    return quote_lifecycle.cancel_invoice(db, principal, invoice)


@router.get("/service-orders/{order_id}", response_model=schemas.ServiceOrderRead)
def read_service_order(
    order_id: int,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    return _load_order(db, principal, order_id)


@router.put("/service-orders/{order_id}/status", response_model=schemas.ServiceOrderRead)
def update_service_order_status(
    order_id: int,
    payload: schemas.ServiceOrderStatusUpdate,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    order = _load_order(db, principal, order_id)
    return quote_lifecycle.change_service_order_status(db, principal, order, payload.status)
