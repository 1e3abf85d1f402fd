from .venue import Venue, PricingType
from .booking import Booking, BookingStatus
from .calendar_event import CalendarEvent
from .media import Media, ReferenceType, MediaType
from .quote import QuoteRequest, QuoteRequestStatus, Quote, QuoteItem, QuoteStatus
from .invoice import Invoice, InvoiceItem, InvoiceStatus
from .service_order import ServiceOrder, ServiceOrderStatus
from .notification import Notification, NotificationStatus

__all__ = [
    "Venue",
    "PricingType",
    "Booking",
    "BookingStatus",
    "CalendarEvent",
    "Media",
    "ReferenceType",
    "MediaType",
    "QuoteRequest",
    "QuoteRequestStatus",
    "Quote",
    "QuoteItem",
    "QuoteStatus",
    "Invoice",
    "InvoiceItem",
    "InvoiceStatus",
    "ServiceOrder",
    "ServiceOrderStatus",
    "Notification",
    "NotificationStatus",
]
