from . import (
    crud_venue,
    crud_booking,
    crud_calendar,
    crud_media,
    crud_quote,
    crud_invoice,
    crud_notification,
)
