from datetime import datetime
from typing import List, Optional

from ..models.media import MediaType, ReferenceType
from .common import CamelModel, IdStr, Pagination


class MediaCreate(CamelModel):
    reference_id: IdStr
    reference_type: ReferenceType
    # Derived from the mimetype when omitted
    media_type: Optional[MediaType] = None
    url: str
    filename: str
    mimetype: Optional[str] = None


class MediaRead(CamelModel):
    id: int
    reference_id: str
    reference_type: ReferenceType
    media_type: MediaType
    url: str
    filename: str
    mimetype: Optional[str] = None
    created_by: str
    is_public: bool
    created_at: datetime
    updated_at: datetime


class MediaList(CamelModel):
    media: List[MediaRead]
    pagination: Pagination
