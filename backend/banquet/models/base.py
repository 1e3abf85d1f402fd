from sqlalchemy import Column, DateTime

from ..database import Base
from ..utils.dates import utcnow


class BaseModel(Base):
    __abstract__ = True

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
