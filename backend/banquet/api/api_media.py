import logging
import math
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from .. import models, schemas
from ..auth.principal import Principal
from ..crud import crud_media
from ..models.media import MediaType, ReferenceType
from ..services import policy
from ..services.ownership import OwnershipResolver, reference_for
from ..utils.errors import Forbidden, NotFound
from .dependencies import get_db, get_ownership_resolver, get_principal, page_params

router = APIRouter(tags=["media"])
logger = logging.getLogger(__name__)


def _load_media(db: Session, media_id: int) -> models.Media:
    media = crud_media.get_media(db, media_id)
    if media is None:
        raise NotFound("Media not found")
    return media


def media_type_for(mimetype: Optional[str]) -> MediaType:
    kind = (mimetype or "").split("/", 1)[0].strip().lower()
    if kind == "image":
        return MediaType.IMAGE
    if kind == "video":
        return MediaType.VIDEO
    return MediaType.OTHER


def _ownership_of(resolver: OwnershipResolver, media: models.Media):
    return resolver.resolve(reference_for(media.reference_type, media.reference_id), missing_ok=True)


@router.post("", response_model=schemas.MediaRead, status_code=status.HTTP_201_CREATED)
def create_media(
    payload: schemas.MediaCreate,
    principal: Principal = Depends(get_principal),
    resolver: OwnershipResolver = Depends(get_ownership_resolver),
    db: Session = Depends(get_db),
):
    media_type = payload.media_type or media_type_for(payload.mimetype)
    ownership = resolver.resolve(reference_for(payload.reference_type, payload.reference_id))
    if not policy.can_upload_media(principal, payload.reference_type, media_type, ownership):
        raise Forbidden("Not allowed to upload media for this reference")
    data = payload.model_dump()
    data["media_type"] = media_type
    media = crud_media.create_media(db, principal.id, data)
    logger.info(
        "Media created",
        extra={"media_id": media.id, "reference_type": media.reference_type.value, "principal_id": principal.id},
    )
    return media


@router.get("/{media_id}", response_model=schemas.MediaRead)
def read_media(
    media_id: int,
    principal: Principal = Depends(get_principal),
    resolver: OwnershipResolver = Depends(get_ownership_resolver),
    db: Session = Depends(get_db),
):
    media = _load_media(db, media_id)
    if policy.can_access_media(principal, media):
        return media
    if not policy.can_access_media(principal, media, _ownership_of(resolver, media)):
        raise Forbidden("Not allowed to access this media")
    return media


@router.delete("/{media_id}", response_model=schemas.MessageResponse)
def delete_media(
    media_id: int,
    principal: Principal = Depends(get_principal),
    resolver: OwnershipResolver = Depends(get_ownership_resolver),
    db: Session = Depends(get_db),
):
    media = _load_media(db, media_id)
    allowed = policy.can_delete_media(principal, media)
    if not allowed and media.reference_type == ReferenceType.VENUE:
        allowed = policy.can_delete_media(principal, media, _ownership_of(resolver, media))
    if not allowed:
        raise Forbidden("Not allowed to delete this media")
    crud_media.delete_media(db, media)
    logger.info("Media deleted", extra={"media_id": media_id, "principal_id": principal.id})
    return {"message": "Media deleted", "success": True}


@router.get("/{reference_type}/{reference_id}", response_model=schemas.MediaList)
def list_media_for_reference(
    reference_type: ReferenceType,
    reference_id: str,
    paging: tuple = Depends(page_params),
    principal: Principal = Depends(get_principal),
    resolver: OwnershipResolver = Depends(get_ownership_resolver),
    db: Session = Depends(get_db),
):
    page, limit = paging
    records = crud_media.list_for_reference(db, reference_type, reference_id)
    ownership = None
    if records and not all(policy.can_access_media(principal, m) for m in records):
        ownership = resolver.resolve(reference_for(reference_type, reference_id), missing_ok=True)
    visible = [m for m in records if policy.can_access_media(principal, m, ownership)]
    total = len(visible)
    start = (page - 1) * limit
    return {
        "media": visible[start:start + limit],
        "pagination": {"total": total, "page": page, "limit": limit, "pages": math.ceil(total / limit) if total else 0},
    }
