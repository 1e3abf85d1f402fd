import enum

from sqlalchemy import Column, Integer, String, Numeric, Text

from .base import BaseModel
from .types import CaseInsensitiveEnum


class PricingType(str, enum.Enum):
    FLAT = "flat"
    PER_HEAD = "per_head"


class Venue(BaseModel):
    __tablename__ = "venues"

    id             = Column(Integer, primary_key=True, index=True)
    vendor_id      = Column(String(64), nullable=False, index=True)
    category_id    = Column(Integer, nullable=True, index=True)
    name           = Column(String, nullable=False)
    description    = Column(Text, nullable=True)
    address        = Column(String, nullable=True)
    capacity       = Column(Integer, nullable=True)
    pricing_type   = Column(
        CaseInsensitiveEnum(PricingType, name="pricingtype"),
        nullable=False,
        default=PricingType.FLAT,
    )
    flat_price     = Column(Numeric(10, 2), nullable=True)
    per_head_price = Column(Numeric(10, 2), nullable=True)
    min_guests     = Column(Integer, nullable=True)
