import enum
from typing import Any, Optional, Type

from sqlalchemy import Enum as SAEnum


def _normalize(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, enum.Enum):
        value = value.value
    return str(value).strip().lower()


class CaseInsensitiveEnum(SAEnum):
    """Status column storing lowercase enum values.

    Statuses arrive from clients as free text ("Confirmed", " PENDING "),
    so binds and results are normalized before the enum lookup. The type
    name defaults to the enum class name.
    """

    def __init__(self, enum_cls: Type[enum.Enum], **kwargs):
        self._enum_cls = enum_cls
        self._enum_kwargs = kwargs.copy()
        kwargs.setdefault("name", enum_cls.__name__.lower())
        kwargs.setdefault("values_callable", lambda members: [m.value for m in members])
        super().__init__(enum_cls, **kwargs)

    def adapt(self, impltype, **kw):
        return CaseInsensitiveEnum(self._enum_cls, **{**self._enum_kwargs, **kw})

    def bind_processor(self, dialect):
        parent = super().bind_processor(dialect)

        def process(value):
            value = _normalize(value)
            if value is None:
                return None
            return parent(value) if parent else value

        return process

    def result_processor(self, dialect, coltype):
        parent = super().result_processor(dialect, coltype)

        def process(value):
            value = _normalize(value)
            if value is None:
                return None
            return parent(value) if parent else value

        return process
