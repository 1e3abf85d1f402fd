from .common import CamelModel, Pagination, MessageResponse
from .venue import VenueCreate, VenueUpdate, VenueRead, VenueList
from .booking import (
    BookingCreate,
    BookingStatusUpdate,
    BookingDelete,
    BookingRead,
    BookingList,
    BookingDeleted,
)
from .calendar import (
    CalendarEventCreate,
    CalendarEventUpdate,
    CalendarEventRead,
    CalendarEventList,
    AvailabilityDay,
    AvailabilityRead,
)
from .media import MediaCreate, MediaRead, MediaList
from .quote import (
    QuoteRequestCreate,
    QuoteRequestRead,
    QuoteRequestList,
    QuoteItemIn,
    QuoteCreate,
    QuoteUpdate,
    QuoteRead,
    QuoteList,
)
from .invoice import (
    InvoiceRead,
    InvoiceList,
    InvoicePay,
    InvoicePaid,
    ServiceOrderRead,
    ServiceOrderStatusUpdate,
)
from .notification import NotificationSend, NotificationCreate, NotificationRead, NotificationList
