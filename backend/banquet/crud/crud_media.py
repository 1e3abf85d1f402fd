from typing import Optional

from sqlalchemy.orm import Session

from .. import models
from ..models.media import ReferenceType


def create_media(db: Session, created_by: str, data: dict) -> models.Media:
    media = models.Media(
        created_by=created_by,
        is_public=data["reference_type"] == ReferenceType.VENUE,
        **data,
    )
    db.add(media)
    db.commit()
    db.refresh(media)
    return media


def get_media(db: Session, media_id: int) -> Optional[models.Media]:
    return db.get(models.Media, media_id)


def list_for_reference(db: Session, reference_type: ReferenceType, reference_id: str) -> list:
    return (
        db.query(models.Media)
        .filter(
            models.Media.reference_type == reference_type,
            models.Media.reference_id == reference_id,
        )
        .order_by(models.Media.id)
        .all()
    )


def delete_media(db: Session, media: models.Media) -> None:
    db.delete(media)
    db.commit()
