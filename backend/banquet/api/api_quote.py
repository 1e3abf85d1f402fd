import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from .. import models, schemas
from ..auth.principal import Principal, Role
from ..context import AppContext
from ..crud import crud_quote
from ..models.quote import QuoteStatus
from ..services import policy, quote_lifecycle
from ..utils.errors import Forbidden, NotFound
from .dependencies import get_context, get_db, get_principal, page_params

router = APIRouter(tags=["quotes"])
logger = logging.getLogger(__name__)


def role_scope(principal: Principal) -> dict:
    """List filters limiting a principal to records it is party to."""
    if principal.is_admin:
        return {}
    if principal.role == Role.SERVICE_PROVIDER:
        return {"service_provider_id": principal.id}
    return {"user_id": principal.id}


def _load_quote(db: Session, principal: Principal, quote_id: int) -> models.Quote:
    quote = crud_quote.get_quote(db, quote_id)
    if quote is None:
        raise NotFound("Quote not found")
    if not policy.can_access_quote(principal, quote):
        raise Forbidden("Not allowed to access this quote")
    return quote


# Quote requests

@router.post("/quote-requests", response_model=schemas.QuoteRequestRead, status_code=status.HTTP_201_CREATED)
def create_quote_request(
    payload: schemas.QuoteRequestCreate,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    return quote_lifecycle.create_quote_request(db, principal, payload.model_dump())


@router.get("/quote-requests", response_model=schemas.QuoteRequestList)
def list_quote_requests(
    paging: tuple = Depends(page_params),
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    page, limit = paging
    requests, pagination = crud_quote.list_quote_requests(db, page, limit, **role_scope(principal))
    return {"quote_requests": requests, "pagination": pagination}


@router.get("/quote-requests/{request_id}", response_model=schemas.QuoteRequestRead)
def read_quote_request(
    request_id: int,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    request = crud_quote.get_quote_request(db, request_id)
    if request is None:
        raise NotFound("Quote request not found")
    if not policy.can_access_quote(principal, request):
        raise Forbidden("Not allowed to access this quote request")
    return request


# Quotes

@router.post("/quotes", response_model=schemas.QuoteRead, status_code=status.HTTP_201_CREATED)
def create_quote(
    payload: schemas.QuoteCreate,
    principal: Principal = Depends(get_principal),
    ctx: AppContext = Depends(get_context),
    db: Session = Depends(get_db),
):
    return quote_lifecycle.create_quote(db, principal, payload, ctx.now(), ctx.settings.QUOTE_VALIDITY_DAYS)


@router.get("/quotes", response_model=schemas.QuoteList)
def list_quotes(
    paging: tuple = Depends(page_params),
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    page, limit = paging
    quotes, pagination = crud_quote.list_quotes(db, page, limit, **role_scope(principal))
    return {"quotes": quotes, "pagination": pagination}


@router.get("/quotes/{quote_id}", response_model=schemas.QuoteRead)
def read_quote(
    quote_id: int,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    quote = _load_quote(db, principal, quote_id)
    return quote_lifecycle.view_quote(db, principal, quote)


@router.put("/quotes/{quote_id}", response_model=schemas.QuoteRead)
def update_quote(
    quote_id: int,
    payload: schemas.QuoteUpdate,
    principal: Principal = Depends(get_principal),
    ctx: AppContext = Depends(get_context),
    db: Session = Depends(get_db),
):
    quote = _load_quote(db, principal, quote_id)
    return quote_lifecycle.update_quote(db, principal, quote, payload, ctx.now())


@router.post("/quotes/{quote_id}/send", response_model=schemas.QuoteRead)
def send_quote(
    quote_id: int,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    quote = _load_quote(db, principal, quote_id)
    return quote_lifecycle.send_quote(db, principal, quote)


@router.post("/quotes/{quote_id}/accept", response_model=schemas.QuoteRead)
def accept_quote(
    quote_id: int,
    principal: Principal = Depends(get_principal),
    ctx: AppContext = Depends(get_context),
    db: Session = Depends(get_db),
):
    quote = _load_quote(db, principal, quote_id)
    return quote_lifecycle.respond_to_quote(db, principal, quote, QuoteStatus.ACCEPTED, ctx.now())


@router.post("/quotes/{quote_id}/reject", response_model=schemas.QuoteRead)
def reject_quote(
    quote_id: int,
    principal: Principal = Depends(get_principal),
    ctx: AppContext = Depends(get_context),
    db: Session = Depends(get_db),
):
    quote = _load_quote(db, principal, quote_id)
    return quote_lifecycle.respond_to_quote(db, principal, quote, QuoteStatus.REJECTED, ctx.now())


@router.post("/quotes/{quote_id}/invoice", response_model=schemas.InvoiceRead, status_code=status.HTTP_201_CREATED)
def invoice_quote(
    quote_id: int,
    principal: Principal = Depends(get_principal),
    ctx: AppContext = Depends(get_context),
    db: Session = Depends(get_db),
):
    quote = _load_quote(db, principal, quote_id)
    return quote_lifecycle.invoice_quote(db, principal, quote, ctx.now(), ctx.settings.INVOICE_DUE_DAYS)
