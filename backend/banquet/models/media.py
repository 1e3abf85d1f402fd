import enum

from sqlalchemy import Column, Integer, String, Boolean

from .base import BaseModel
from .types import CaseInsensitiveEnum


class ReferenceType(str, enum.Enum):
    VENUE = "venue"
    BOOKING = "booking"
    USER = "user"
    PROFILE = "profile"


class MediaType(str, enum.Enum):
    IMAGE = "image"
    VIDEO = "video"
    OTHER = "other"


class Media(BaseModel):
    __tablename__ = "media"

    id             = Column(Integer, primary_key=True, index=True)
    reference_id   = Column(String(64), nullable=False, index=True)
    reference_type = Column(CaseInsensitiveEnum(ReferenceType, name="referencetype"), nullable=False, index=True)
    media_type     = Column(CaseInsensitiveEnum(MediaType, name="mediatype"), nullable=False, default=MediaType.IMAGE)
    url            = Column(String, nullable=False)
    filename       = Column(String, nullable=False)
    mimetype       = Column(String, nullable=True)
    created_by     = Column(String(64), nullable=False, index=True)
    is_public      = Column(Boolean, nullable=False, default=False)
