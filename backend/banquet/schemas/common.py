from decimal import Decimal
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

from ..utils.errors import ValidationError


def _coerce_id(value: Any) -> Any:
    # Identity ids are opaque strings; numeric ids from clients are accepted
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


IdStr = Annotated[str, BeforeValidator(_coerce_id)]

# Money stays Decimal internally and renders as a JSON number
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CamelModel(BaseModel):
    """Base for wire schemas: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Pagination(CamelModel):
    total: int
    page: int
    limit: int
    pages: int


class MessageResponse(CamelModel):
    message: str
    success: bool = True


def reject_nulls(changes: dict, fields) -> None:
    """Raise when a partial update sets a required field to null."""
    for key in fields:
        if key in changes and changes[key] is None:
            field = to_camel(key)
            raise ValidationError(field, f"{field} cannot be null")
