import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api import api_booking, api_calendar, api_invoice, api_media, api_notification, api_quote, api_venue
from .context import AppContext, build_context
from .core.config import Settings, load_settings
from .core.observability import setup_logging
from .services.maintenance import run_sweep
from .utils.errors import BanquetError, log_error

logger = logging.getLogger(__name__)


async def maintenance_loop(ctx: AppContext) -> None:
    """Periodically expire stale quotes and flag overdue invoices."""
    interval = ctx.settings.MAINTENANCE_INTERVAL_SECONDS
    while True:
        await asyncio.sleep(interval)
        try:
            await asyncio.to_thread(run_sweep, ctx.session_factory, ctx.now())
        except SQLAlchemyError:
            # Transient store failures are retried on the next tick
            logger.exception("Maintenance sweep failed")
        except Exception:
            logger.exception("Unexpected error in maintenance sweep")


def _validation_details(errors: list) -> dict:
    cleaned = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in errors
    ]
    field = None
    if cleaned and cleaned[0]["loc"]:
        field = str(cleaned[0]["loc"][-1])
    return {"field": field, "errors": cleaned}


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(BanquetError)
    async def banquet_error_handler(request: Request, exc: BanquetError):
        log_error(exc, request.url.path)
        return ORJSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_payload()))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        logger.warning("Validation error at %s: %s", request.url.path, errors)
        return ORJSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Validation failed", "details": jsonable_encoder(_validation_details(errors))},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        logger.warning("HTTP error %s at %s: %s", exc.status_code, request.url.path, exc.detail)
        return ORJSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.middleware("http")
    async def catch_exceptions(request: Request, call_next):
        """Turn anything unhandled into a bare 500 and log the traceback."""
        try:
            return await call_next(request)
        except Exception as exc:
            logger.exception("Unhandled error at %s: %s", request.url.path, exc)
            return ORJSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"error": "Internal Server Error"},
            )


def create_app(settings: Optional[Settings] = None, context: Optional[AppContext] = None) -> FastAPI:
    """Build the marketplace API.

    ``context`` may be supplied to share wiring (tests inject fakes this
    way); otherwise one is built from ``settings``.
    """
    settings = settings or (context.settings if context else load_settings())
    setup_logging(settings)
    ctx = context or build_context(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        task = None
        if settings.MAINTENANCE_INTERVAL_SECONDS > 0:
            task = asyncio.create_task(maintenance_loop(ctx))
        try:
            yield
        finally:
            if task is not None:
                task.cancel()
            ctx.close()

    # Always use ORJSONResponse for JSON payloads
    app = FastAPI(title="Banquet Marketplace API", default_response_class=ORJSONResponse, lifespan=lifespan)
    app.state.ctx = ctx
    register_error_handlers(app)

    @app.get("/health")
    def health():
        return {"status": "ok", "service": settings.SERVICE_NAME}

    app.include_router(api_venue.router, prefix="/api/venue/venues")
    app.include_router(api_booking.router, prefix="/api/booking/bookings")
    app.include_router(api_calendar.router, prefix="/api/calendar")
    app.include_router(api_media.router, prefix="/api/media")
    app.include_router(api_quote.router, prefix="/api/service-provider")
    app.include_router(api_invoice.router, prefix="/api/service-provider")
    app.include_router(api_notification.router, prefix="/api/notification")
    return app
