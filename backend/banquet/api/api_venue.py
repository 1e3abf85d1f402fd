from typing import Optional
import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from .. import schemas
from ..auth.principal import Principal, Role
from ..crud import crud_venue
from ..schemas.common import reject_nulls
from ..services import policy
from ..utils.errors import Forbidden, ValidationError
from .dependencies import get_db, get_principal, page_params

router = APIRouter(tags=["venues"])
logger = logging.getLogger(__name__)

NON_NULLABLE_FIELDS = ("vendor_id", "name", "pricing_type")


@router.post("", response_model=schemas.VenueRead, status_code=status.HTTP_201_CREATED)
def create_venue(
    payload: schemas.VenueCreate,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    if not policy.can_create_venue(principal):
        raise Forbidden("Only admins or KYC-approved vendors can create venues")
    if principal.role == Role.VENDOR:
        vendor_id = principal.id
    elif payload.vendor_id:
        vendor_id = payload.vendor_id
    else:
        raise ValidationError("vendorId", "vendorId is required")
    venue = crud_venue.create_venue(db, vendor_id, payload.model_dump(exclude={"vendor_id"}))
    logger.info("Venue created", extra={"venue_id": venue.id, "principal_id": principal.id})
    return venue


@router.get("", response_model=schemas.VenueList)
def list_venues(
    vendor_id: Optional[str] = Query(None, alias="vendorId"),
    category_id: Optional[int] = Query(None, alias="categoryId"),
    paging: tuple = Depends(page_params),
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    page, limit = paging
    venues, pagination = crud_venue.list_venues(db, page, limit, vendor_id=vendor_id, category_id=category_id)
    return {"venues": venues, "pagination": pagination}


@router.get("/{venue_id}", response_model=schemas.VenueRead)
def read_venue(
    venue_id: int,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    return crud_venue.get_venue_or_404(db, venue_id)


@router.put("/{venue_id}", response_model=schemas.VenueRead)
def update_venue(
    venue_id: int,
    payload: schemas.VenueUpdate,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    venue = crud_venue.get_venue_or_404(db, venue_id)
    if not policy.can_write_venue(principal, venue):
        raise Forbidden("Not allowed to manage this venue")
    changes = payload.model_dump(exclude_unset=True)
    reject_nulls(changes, NON_NULLABLE_FIELDS)
    if "vendor_id" in changes and changes["vendor_id"] != venue.vendor_id and not principal.is_admin:
        raise Forbidden("Only admins can transfer a venue to another vendor")
    venue = crud_venue.update_venue(db, venue, changes)
    logger.info("Venue updated", extra={"venue_id": venue.id, "principal_id": principal.id})
    return venue


@router.delete("/{venue_id}", response_model=schemas.MessageResponse)
def delete_venue(
    venue_id: int,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    venue = crud_venue.get_venue_or_404(db, venue_id)
    if not policy.can_write_venue(principal, venue):
        raise Forbidden("Not allowed to manage this venue")
    crud_venue.delete_venue(db, venue)
    logger.info("Venue deleted", extra={"venue_id": venue_id, "principal_id": principal.id})
    return {"message": "Venue deleted", "success": True}
