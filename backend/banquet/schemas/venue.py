from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field

from ..models.venue import PricingType
from .common import CamelModel, IdStr, Money, Pagination


class VenueBase(CamelModel):
    category_id: Optional[int] = None
    name: str
    description: Optional[str] = None
    address: Optional[str] = None
    capacity: Optional[int] = Field(default=None, gt=0)
    pricing_type: PricingType = PricingType.FLAT
    flat_price: Optional[Decimal] = None
    per_head_price: Optional[Decimal] = None
    min_guests: Optional[int] = None


class VenueCreate(VenueBase):
    # Forced to the caller's id for vendors; required for admins
    vendor_id: Optional[IdStr] = None


class VenueUpdate(CamelModel):
    vendor_id: Optional[IdStr] = None
    category_id: Optional[int] = None
    name: Optional[str] = None
    description: Optional[str] = None
    address: Optional[str] = None
    capacity: Optional[int] = Field(default=None, gt=0)
    pricing_type: Optional[PricingType] = None
    flat_price: Optional[Decimal] = None
    per_head_price: Optional[Decimal] = None
    min_guests: Optional[int] = None


class VenueRead(CamelModel):
    id: int
    vendor_id: str
    category_id: Optional[int] = None
    name: str
    description: Optional[str] = None
    address: Optional[str] = None
    capacity: Optional[int] = None
    pricing_type: PricingType
    flat_price: Optional[Money] = None
    per_head_price: Optional[Money] = None
    min_guests: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class VenueList(CamelModel):
    venues: List[VenueRead]
    pagination: Pagination
